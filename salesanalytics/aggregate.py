"""Group-by rollups, rankings and KPI snapshots for both pipelines."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

import numpy as np
import pandas as pd

from .catalog import CatalogIndex, reconcile
from .config import AnalyticsConfig

logger = logging.getLogger(__name__)

LEDGER_DIMENSIONS = ("management_unit", "sector", "type", "reseller", "product")
LEDGER_SUMS = {"valor_total": "transaction_value", "itens": "item_quantity"}


@dataclass
class ProductAnalytics:
    """Snapshot of the products + buyers pipeline."""

    total_revenue: float
    total_sales: int
    total_products: int
    total_buyers: int
    products: pd.DataFrame
    buyers: pd.DataFrame
    top_products: pd.DataFrame
    top_buyers: pd.DataFrame
    category_stats: pd.DataFrame
    unmatched_purchases: int = 0

    def kpis(self) -> Dict[str, float]:
        return {
            "total_revenue": self.total_revenue,
            "total_sales": self.total_sales,
            "total_products": self.total_products,
            "total_buyers": self.total_buyers,
        }


@dataclass
class LedgerAnalytics:
    """Snapshot of the sales-ledger pipeline."""

    total_value: float
    total_items: float
    transactions: int
    resellers: int
    products: int
    average_ticket: float
    rows: pd.DataFrame
    by_management_unit: pd.DataFrame
    by_sector: pd.DataFrame
    by_type: pd.DataFrame
    by_reseller: pd.DataFrame
    by_product: pd.DataFrame
    top_resellers: pd.DataFrame
    top_products: pd.DataFrame
    top_products_per_reseller: Dict[str, pd.DataFrame] = field(default_factory=dict)

    def kpis(self) -> Dict[str, float]:
        return {
            "total_value": self.total_value,
            "total_items": self.total_items,
            "transactions": self.transactions,
            "resellers": self.resellers,
            "products": self.products,
            "average_ticket": self.average_ticket,
        }


def rank(frame: pd.DataFrame, column: str, limit: Optional[int] = None) -> pd.DataFrame:
    """Sort descending by ``column``; equal values keep their current order."""

    ordered = (
        frame.assign(_seen=np.arange(len(frame)))
        .sort_values([column, "_seen"], ascending=[False, True])
        .drop(columns="_seen")
        .reset_index(drop=True)
    )
    if limit is not None:
        ordered = ordered.head(limit)
    return ordered


def group_aggregate(
    frame: pd.DataFrame,
    key: str,
    sums: Mapping[str, str],
    sort_by: str,
    count_column: Optional[str] = None,
) -> pd.DataFrame:
    """One accumulator row per distinct ``key`` value, ranked by ``sort_by``.

    ``sums`` maps output column to source column.  Groups are created in the
    order their key first appears, which is the tie-break of the ranking.
    """

    columns = [key, *sums]
    if count_column:
        columns.append(count_column)
    if frame.empty:
        return pd.DataFrame(columns=columns)

    grouped = frame.groupby(key, sort=False, dropna=False)
    result = grouped.agg(**{output: (source, "sum") for output, source in sums.items()})
    if count_column:
        result[count_column] = grouped.size()
    result = result.reset_index()
    return rank(result.loc[:, columns], sort_by)


def build_product_analytics(
    catalog: pd.DataFrame,
    purchases: pd.DataFrame,
    settings: Optional[AnalyticsConfig] = None,
) -> ProductAnalytics:
    """Join purchases onto a fresh catalog index and compute the rollups."""

    settings = settings or AnalyticsConfig()
    index = CatalogIndex.build(catalog)
    joined = reconcile(purchases, index)
    products = joined.products
    buyers = joined.buyers

    category_stats = group_aggregate(
        products,
        "category",
        {"sales": "sales", "revenue": "revenue"},
        sort_by="revenue",
    )

    logger.info(
        "Computed product analytics for %d products and %d buyers",
        len(products),
        len(buyers),
    )
    return ProductAnalytics(
        total_revenue=float(products["revenue"].sum()),
        total_sales=int(products["sales"].sum()),
        total_products=int(len(products)),
        total_buyers=int(len(buyers)),
        products=products,
        buyers=buyers,
        top_products=rank(products, "sales", settings.top_products),
        top_buyers=rank(buyers, "purchases", settings.top_buyers),
        category_stats=category_stats,
        unmatched_purchases=joined.unmatched,
    )


def aggregate_ledger(rows: pd.DataFrame, dimension: str) -> pd.DataFrame:
    return group_aggregate(rows, dimension, LEDGER_SUMS, sort_by="valor_total", count_column="quantidade")


def top_products_per_reseller(
    rows: pd.DataFrame,
    resellers,
    limit: int = 5,
) -> Dict[str, pd.DataFrame]:
    """For each reseller, its best-selling products ranked by item quantity."""

    nested: Dict[str, pd.DataFrame] = {}
    for reseller in resellers:
        subset = rows.loc[rows["reseller"] == reseller]
        products = group_aggregate(subset, "product", LEDGER_SUMS, sort_by="itens", count_column="quantidade")
        nested[reseller] = products.head(limit).reset_index(drop=True)
    return nested


def build_ledger_analytics(
    rows: pd.DataFrame,
    settings: Optional[AnalyticsConfig] = None,
) -> LedgerAnalytics:
    settings = settings or AnalyticsConfig()
    groups = {dimension: aggregate_ledger(rows, dimension) for dimension in LEDGER_DIMENSIONS}

    top_resellers = groups["reseller"].head(settings.top_resellers).reset_index(drop=True)
    nested = top_products_per_reseller(
        rows,
        top_resellers["reseller"].tolist(),
        settings.products_per_reseller,
    )

    total_value = float(rows["transaction_value"].sum())
    transactions = int(len(rows))
    logger.info("Computed ledger analytics for %d transactions", transactions)
    return LedgerAnalytics(
        total_value=total_value,
        total_items=float(rows["item_quantity"].sum()),
        transactions=transactions,
        resellers=int(len(groups["reseller"])),
        products=int(len(groups["product"])),
        average_ticket=total_value / transactions if transactions else 0.0,
        rows=rows,
        by_management_unit=groups["management_unit"],
        by_sector=groups["sector"],
        by_type=groups["type"],
        by_reseller=groups["reseller"],
        by_product=groups["product"],
        top_resellers=top_resellers,
        top_products=groups["product"].head(settings.top_ledger_products).reset_index(drop=True),
        top_products_per_reseller=nested,
    )


__all__ = [
    "LEDGER_DIMENSIONS",
    "LedgerAnalytics",
    "ProductAnalytics",
    "aggregate_ledger",
    "build_ledger_analytics",
    "build_product_analytics",
    "group_aggregate",
    "rank",
    "top_products_per_reseller",
]
