from __future__ import annotations

import pandas as pd
import pytest

from salesanalytics.aggregate import (
    LEDGER_DIMENSIONS,
    build_ledger_analytics,
    build_product_analytics,
    group_aggregate,
    rank,
)
from salesanalytics.config import AnalyticsConfig
from salesanalytics.normalize import normalize_catalog, normalize_ledger, normalize_purchases


@pytest.fixture
def ledger_rows(raw_ledger) -> pd.DataFrame:
    return normalize_ledger(raw_ledger)


def test_product_analytics_totals(raw_catalog, raw_purchases):
    analytics = build_product_analytics(normalize_catalog(raw_catalog), normalize_purchases(raw_purchases))

    assert analytics.total_revenue == pytest.approx(71.0)
    assert analytics.total_sales == 4
    assert analytics.total_products == 3
    assert analytics.total_buyers == 2
    assert analytics.unmatched_purchases == 1
    assert analytics.top_products["name"].tolist() == ["Widget", "Gadget", "Gizmo"]
    assert analytics.top_buyers["name"].tolist() == ["Ana", "Bruno"]


def test_category_stats_ranked_by_revenue(raw_catalog, raw_purchases):
    analytics = build_product_analytics(normalize_catalog(raw_catalog), normalize_purchases(raw_purchases))

    stats = analytics.category_stats
    assert stats["category"].tolist() == ["Sem Categoria", "Tools"]
    assert stats["revenue"].tolist() == pytest.approx([51.0, 20.0])
    assert stats["sales"].tolist() == [2, 2]


def test_top_lists_respect_configured_limits(raw_catalog, raw_purchases):
    settings = AnalyticsConfig(top_products=1, top_buyers=1)
    analytics = build_product_analytics(
        normalize_catalog(raw_catalog), normalize_purchases(raw_purchases), settings
    )
    assert len(analytics.top_products) == 1
    assert len(analytics.top_buyers) == 1
    assert len(analytics.products) == 3


def test_product_analytics_is_idempotent(raw_catalog, raw_purchases):
    catalog = normalize_catalog(raw_catalog)
    purchases = normalize_purchases(raw_purchases)
    first = build_product_analytics(catalog, purchases)
    second = build_product_analytics(catalog, purchases)

    pd.testing.assert_frame_equal(first.products, second.products)
    pd.testing.assert_frame_equal(first.buyers, second.buyers)
    pd.testing.assert_frame_equal(first.category_stats, second.category_stats)
    assert first.kpis() == second.kpis()


def test_group_aggregate_ties_keep_first_seen_order():
    rows = pd.DataFrame(
        {
            "reseller": ["C", "B", "A", "B"],
            "transaction_value": [5.0, 4.0, 10.0, 6.0],
            "item_quantity": [1, 1, 1, 1],
        }
    )
    groups = group_aggregate(
        rows,
        "reseller",
        {"valor_total": "transaction_value", "itens": "item_quantity"},
        sort_by="valor_total",
        count_column="quantidade",
    )
    assert groups["reseller"].tolist() == ["B", "A", "C"]
    assert groups["quantidade"].tolist() == [2, 1, 1]
    assert list(groups.columns) == ["reseller", "valor_total", "itens", "quantidade"]


def test_rank_is_not_alphabetical_on_ties():
    frame = pd.DataFrame({"name": ["zeta", "alpha", "mid"], "sales": [1, 1, 3]})
    assert rank(frame, "sales")["name"].tolist() == ["mid", "zeta", "alpha"]
    assert rank(frame, "sales", limit=2)["name"].tolist() == ["mid", "zeta"]


def test_group_aggregate_on_empty_frame():
    empty = pd.DataFrame(columns=["type", "transaction_value", "item_quantity"])
    groups = group_aggregate(empty, "type", {"valor_total": "transaction_value"}, sort_by="valor_total")
    assert groups.empty
    assert list(groups.columns) == ["type", "valor_total"]


def test_ledger_group_totals_are_conserved(ledger_rows):
    analytics = build_ledger_analytics(ledger_rows)
    total = ledger_rows["transaction_value"].sum()

    for table in (
        analytics.by_management_unit,
        analytics.by_sector,
        analytics.by_type,
        analytics.by_reseller,
        analytics.by_product,
    ):
        assert table["valor_total"].sum() == pytest.approx(total)
        assert table["quantidade"].sum() == len(ledger_rows)
    assert len(LEDGER_DIMENSIONS) == 5


def test_ledger_kpis_and_rankings(ledger_rows):
    analytics = build_ledger_analytics(ledger_rows)

    assert analytics.total_value == pytest.approx(390.0)
    assert analytics.total_items == pytest.approx(12.0)
    assert analytics.transactions == 5
    assert analytics.resellers == 3
    assert analytics.products == 3
    assert analytics.average_ticket == pytest.approx(78.0)

    assert analytics.top_resellers["reseller"].tolist() == ["017 - Maria", "042 - Jane Doe", "099 - Rita"]
    assert analytics.by_management_unit["management_unit"].tolist() == ["7", "04"]
    assert analytics.by_sector["sector"].tolist() == ["Sul", "Norte", "Centro"]
    assert analytics.top_products["product"].tolist() == ["P1 - Perfume", "P2 - Creme", "P3 - Batom"]

    jane = analytics.by_reseller.set_index("reseller").loc["042 - Jane Doe"]
    assert jane["valor_total"] == pytest.approx(145.0)
    assert jane["quantidade"] == 3
    assert jane["itens"] == pytest.approx(10.0)


def test_top_products_per_reseller_ranked_by_items(ledger_rows):
    analytics = build_ledger_analytics(ledger_rows)
    nested = analytics.top_products_per_reseller

    assert list(nested) == ["017 - Maria", "042 - Jane Doe", "099 - Rita"]
    jane = nested["042 - Jane Doe"]
    assert jane["product"].tolist() == ["P2 - Creme", "P3 - Batom", "P1 - Perfume"]
    assert jane["itens"].tolist() == pytest.approx([6.0, 3.0, 1.0])


def test_nested_item_ties_keep_first_seen_product_order():
    rows = pd.DataFrame(
        {
            "management_unit": ["01", "01"],
            "sector": ["Norte", "Norte"],
            "reseller": ["R", "R"],
            "product": ["First", "Second"],
            "type": ["Venda", "Venda"],
            "item_quantity": [2.0, 2.0],
            "transaction_value": [10.0, 50.0],
            "total_value": [10.0, 50.0],
        }
    )

    nested = build_ledger_analytics(rows).top_products_per_reseller

    assert nested["R"]["product"].tolist() == ["First", "Second"]
    assert nested["R"]["valor_total"].tolist() == pytest.approx([10.0, 50.0])


def test_nested_rankings_are_truncated(ledger_rows):
    settings = AnalyticsConfig(top_resellers=1, products_per_reseller=2, top_ledger_products=1)
    analytics = build_ledger_analytics(ledger_rows, settings)

    assert list(analytics.top_products_per_reseller) == ["017 - Maria"]
    assert len(analytics.top_products) == 1
    assert len(analytics.by_product) == 3


def test_ledger_analytics_is_idempotent(ledger_rows):
    first = build_ledger_analytics(ledger_rows)
    second = build_ledger_analytics(ledger_rows)
    pd.testing.assert_frame_equal(first.by_reseller, second.by_reseller)
    assert first.kpis() == second.kpis()
