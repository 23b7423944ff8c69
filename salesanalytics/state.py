"""Immutable pipeline state and the transitions that produce new states."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Any, Optional

import pandas as pd

from .aggregate import (
    LedgerAnalytics,
    ProductAnalytics,
    build_ledger_analytics,
    build_product_analytics,
)
from .config import AppConfig
from .errors import UploadError
from .io import Decoder, load_table, read_spreadsheet
from .views import FilteredView, FilterState, filter_ledger, filter_products

logger = logging.getLogger(__name__)

SLOTS = ("products", "buyers", "ledger")


@dataclass(frozen=True, eq=False)
class UploadSlot:
    """Normalised table of one upload slot plus its loading/error flags."""

    table: Optional[pd.DataFrame] = None
    filename: Optional[str] = None
    error: str = ""
    loading: bool = False

    @property
    def loaded(self) -> bool:
        return self.table is not None


@dataclass(frozen=True, eq=False)
class PipelineState:
    """Everything the dashboard shows is derived from one of these.

    Analytics are computed lazily and cached on the instance; every
    transition returns a new state, so a cached snapshot never goes stale.
    """

    products: UploadSlot = field(default_factory=UploadSlot)
    buyers: UploadSlot = field(default_factory=UploadSlot)
    ledger: UploadSlot = field(default_factory=UploadSlot)
    filters: FilterState = field(default_factory=FilterState)
    config: AppConfig = field(default_factory=AppConfig)

    def slot(self, name: str) -> UploadSlot:
        _check_slot(name)
        return getattr(self, name)

    @cached_property
    def product_analytics(self) -> Optional[ProductAnalytics]:
        if not (self.products.loaded and self.buyers.loaded):
            return None
        return build_product_analytics(
            self.products.table, self.buyers.table, self.config.analytics
        )

    @cached_property
    def ledger_analytics(self) -> Optional[LedgerAnalytics]:
        if not self.ledger.loaded:
            return None
        return build_ledger_analytics(self.ledger.table, self.config.analytics)

    @cached_property
    def filtered_products(self) -> Optional[FilteredView]:
        analytics = self.product_analytics
        if analytics is None:
            return None
        return filter_products(analytics.products, self.filters)

    @cached_property
    def filtered_ledger(self) -> Optional[FilteredView]:
        analytics = self.ledger_analytics
        if analytics is None:
            return None
        return filter_ledger(analytics.rows, self.filters)


def begin_upload(state: PipelineState, slot: str) -> PipelineState:
    current = state.slot(slot)
    return _with_slot(state, slot, replace(current, loading=True, error=""))


def load_upload(
    state: PipelineState,
    slot: str,
    filename: str,
    content: bytes,
    decoder: Decoder = read_spreadsheet,
) -> PipelineState:
    """Decode and normalise one upload into ``slot``.

    A rejected upload records its message on the slot and keeps whatever
    table the slot held before; other slots are never touched.
    """

    current = state.slot(slot)
    try:
        table = load_table(
            content,
            filename,
            slot,
            aliases=state.config.aliases,
            settings=state.config.analytics,
            decoder=decoder,
        )
    except UploadError as exc:
        logger.warning("Upload '%s' rejected for %s: %s", filename, slot, exc)
        return _with_slot(state, slot, replace(current, error=str(exc), loading=False))

    return _with_slot(state, slot, UploadSlot(table=table, filename=filename))


def dismiss_error(state: PipelineState, slot: str) -> PipelineState:
    return _with_slot(state, slot, replace(state.slot(slot), error=""))


def set_filters(state: PipelineState, **changes: Any) -> PipelineState:
    return replace(state, filters=replace(state.filters, **changes))


def clear_slot(state: PipelineState, slot: str) -> PipelineState:
    return _with_slot(state, slot, UploadSlot())


def reset(state: PipelineState) -> PipelineState:
    """Drop every loaded table and filter, keeping the configuration."""

    return PipelineState(config=state.config)


def _with_slot(state: PipelineState, slot: str, value: UploadSlot) -> PipelineState:
    _check_slot(slot)
    return replace(state, **{slot: value})


def _check_slot(name: str) -> None:
    if name not in SLOTS:
        raise ValueError(f"Unknown upload slot '{name}'")


__all__ = [
    "PipelineState",
    "SLOTS",
    "UploadSlot",
    "begin_upload",
    "clear_slot",
    "dismiss_error",
    "load_upload",
    "reset",
    "set_filters",
]
