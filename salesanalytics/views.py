"""Read-only filtering and search over normalised rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence

import pandas as pd

from .headers import is_blank
from .normalize import key_text

ALL = "all"


@dataclass(frozen=True)
class FilterState:
    """Active search term plus equality filters (``"all"`` disables one).

    ``category`` applies to catalog products and ``type`` to ledger rows.
    """

    search_term: str = ""
    category: Any = ALL
    type: Any = ALL
    management_unit: Any = ALL


@dataclass
class FilteredView:
    rows: pd.DataFrame
    total: int

    def preview(self, limit: int = 100) -> pd.DataFrame:
        return self.rows.head(limit)

    def caption(self, limit: int = 100) -> str:
        shown = min(limit, self.total)
        return f"Mostrando {shown} de {self.total}"


def filter_products(products: pd.DataFrame, filters: FilterState) -> FilteredView:
    """Catalog view: category equality and search over name and id."""

    mask = pd.Series(True, index=products.index)
    if filters.category != ALL:
        mask &= products["category"] == filters.category
    if filters.search_term:
        mask &= _search_mask(products, ("name", "id"), filters.search_term)
    return _view(products, mask)


def filter_ledger(rows: pd.DataFrame, filters: FilterState) -> FilteredView:
    """Ledger view: type and management unit equality, label search."""

    mask = pd.Series(True, index=rows.index)
    if filters.type != ALL:
        mask &= rows["type"] == filters.type
    if filters.management_unit != ALL:
        mask &= rows["management_unit"] == filters.management_unit
    if filters.search_term:
        mask &= _search_mask(rows, ("reseller", "product", "sector"), filters.search_term)
    return _view(rows, mask)


def filter_options(frame: pd.DataFrame, column: str) -> List[Any]:
    """``"all"`` followed by the distinct values of ``column`` in first-seen order."""

    if frame is None or column not in frame.columns:
        return [ALL]
    return [ALL, *pd.unique(frame[column]).tolist()]


def _search_mask(frame: pd.DataFrame, columns: Sequence[str], term: str) -> pd.Series:
    needle = term.lower()
    mask = pd.Series(False, index=frame.index)
    for column in columns:
        text = frame[column].map(lambda value: "" if is_blank(value) else key_text(value).lower()).astype(str)
        mask |= text.str.contains(needle, regex=False)
    return mask


def _view(frame: pd.DataFrame, mask: pd.Series) -> FilteredView:
    rows = frame.loc[mask].reset_index(drop=True)
    return FilteredView(rows=rows, total=int(len(rows)))


__all__ = [
    "ALL",
    "FilterState",
    "FilteredView",
    "filter_ledger",
    "filter_options",
    "filter_products",
]
