"""Catalog index and the purchase reconciliation join."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .headers import is_blank
from .normalize import key_text

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = ["id", "name", "price", "category", "sales", "revenue"]
BUYER_COLUMNS = ["name", "purchases", "total_spent", "average_ticket"]


@dataclass
class CatalogEntry:
    """A catalog product with its sales counters."""

    id: Any
    name: Any
    price: float
    category: Any
    sales: int = 0
    revenue: float = 0.0


@dataclass
class BuyerAggregate:
    name: Any
    purchases: int = 0
    total_spent: float = 0.0


@dataclass
class JoinResult:
    """Structured output from :func:`reconcile`."""

    products: pd.DataFrame
    buyers: pd.DataFrame
    matched: int = 0
    unmatched: int = 0


class CatalogIndex:
    """Products keyed by ``str(id)`` with an exact-name fallback.

    Duplicate identifiers overwrite the earlier entry but keep its position,
    so iteration order is the order in which each key was first seen.
    """

    def __init__(self, entries: Dict[str, CatalogEntry]) -> None:
        self._entries = entries
        self._by_name: Dict[str, CatalogEntry] = {}
        for entry in entries.values():
            if is_blank(entry.name):
                continue
            self._by_name.setdefault(key_text(entry.name).lower(), entry)

    @classmethod
    def build(cls, seeds: pd.DataFrame) -> "CatalogIndex":
        entries: Dict[str, CatalogEntry] = {}
        for record in seeds.to_dict(orient="records"):
            price = record.get("price")
            entries[key_text(record.get("id"))] = CatalogEntry(
                id=record.get("id"),
                name=record.get("name"),
                price=float(price) if price is not None and not pd.isna(price) else 0.0,
                category=record.get("category"),
            )
        logger.debug("Indexed %d catalog entries from %d rows", len(entries), len(seeds))
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())

    def get(self, key: str) -> Optional[CatalogEntry]:
        return self._entries.get(key)

    def lookup(self, ref: Any) -> Optional[CatalogEntry]:
        """Exact key match first, then a case-insensitive exact name match."""

        ref_text = ref if isinstance(ref, str) else key_text(ref)
        entry = self._entries.get(ref_text)
        if entry is not None:
            return entry
        return self._by_name.get(ref_text.lower())

    def to_frame(self) -> pd.DataFrame:
        return _records_frame((asdict(entry) for entry in self._entries.values()), PRODUCT_COLUMNS)


def reconcile(purchases: pd.DataFrame, index: CatalogIndex) -> JoinResult:
    """Accumulate each resolvable purchase onto its product and buyer.

    The entries of ``index`` are updated in place; callers recomputing
    analytics build a fresh index for every pass.  Purchases that resolve to
    no product leave no trace.
    """

    buyers: Dict[Any, BuyerAggregate] = {}
    matched = 0
    unmatched = 0

    for buyer_name, product_ref in zip(purchases["buyer_name"], purchases["product_ref"]):
        entry = index.lookup(product_ref)
        if entry is None:
            unmatched += 1
            continue

        matched += 1
        entry.sales += 1
        entry.revenue += entry.price

        aggregate = buyers.get(buyer_name)
        if aggregate is None:
            aggregate = buyers[buyer_name] = BuyerAggregate(name=buyer_name)
        aggregate.purchases += 1
        aggregate.total_spent += entry.price

    logger.debug("Reconciled %d purchases, %d without a catalog match", matched, unmatched)

    buyer_records: List[Dict[str, Any]] = []
    for aggregate in buyers.values():
        record = asdict(aggregate)
        record["average_ticket"] = aggregate.total_spent / aggregate.purchases
        buyer_records.append(record)

    return JoinResult(
        products=index.to_frame(),
        buyers=_records_frame(buyer_records, BUYER_COLUMNS),
        matched=matched,
        unmatched=unmatched,
    )


def _records_frame(records: Iterable[Dict[str, Any]], columns: List[str]) -> pd.DataFrame:
    frame = pd.DataFrame(list(records), columns=columns)
    for column in ("sales", "purchases"):
        if column in frame.columns:
            frame[column] = frame[column].astype(int)
    for column in ("price", "revenue", "total_spent", "average_ticket"):
        if column in frame.columns:
            frame[column] = frame[column].astype(float)
    return frame


__all__ = [
    "BuyerAggregate",
    "CatalogEntry",
    "CatalogIndex",
    "JoinResult",
    "reconcile",
]
