import pandas as pd

from salesanalytics.normalize import normalize_ledger
from salesanalytics.views import ALL, FilterState, filter_ledger, filter_options, filter_products


def _products():
    return pd.DataFrame(
        {
            "id": [101, 202, 303],
            "name": ["Blue Pen", "Red Pen", None],
            "price": [1.0, 2.0, 3.0],
            "category": ["Office", "Office", "Home"],
            "sales": [0, 0, 0],
            "revenue": [0.0, 0.0, 0.0],
        }
    )


def test_default_filters_return_everything():
    view = filter_products(_products(), FilterState())
    assert view.total == 3
    assert len(view.rows) == 3


def test_search_matches_name_case_insensitively_or_id():
    products = _products()
    assert filter_products(products, FilterState(search_term="PEN")).rows["id"].tolist() == [101, 202]
    assert filter_products(products, FilterState(search_term="30")).rows["id"].tolist() == [303]


def test_filters_compose_with_and():
    view = filter_products(_products(), FilterState(search_term="pen", category="Home"))
    assert view.total == 0
    view = filter_products(_products(), FilterState(search_term="red", category="Office"))
    assert view.rows["name"].tolist() == ["Red Pen"]


def test_filtering_does_not_mutate_input():
    products = _products()
    filter_products(products, FilterState(category="Home"))
    assert len(products) == 3


def test_ledger_filters(raw_ledger):
    rows = normalize_ledger(raw_ledger)

    by_type = filter_ledger(rows, FilterState(type="Brinde"))
    assert by_type.rows["product"].tolist() == ["P3 - Batom"]

    by_unit = filter_ledger(rows, FilterState(management_unit="7"))
    assert by_unit.total == 2

    search = filter_ledger(rows, FilterState(search_term="jane", management_unit="04", type="Venda"))
    assert search.total == 2

    by_sector = filter_ledger(rows, FilterState(search_term="sul"))
    assert by_sector.rows["reseller"].tolist() == ["017 - Maria", "099 - Rita"]


def test_category_and_type_filters_are_independent(raw_ledger):
    rows = normalize_ledger(raw_ledger)
    filters = FilterState(category="Office", type="Brinde")

    assert filter_ledger(rows, filters).total == 1
    assert filter_ledger(rows, FilterState(category="Office")).total == 5
    assert filter_products(_products(), FilterState(type="Brinde")).total == 3


def test_preview_and_caption_report_full_count():
    products = pd.concat([_products()] * 50, ignore_index=True)
    view = filter_products(products, FilterState())
    assert len(view.preview(100)) == 100
    assert view.total == 150
    assert view.caption(100) == "Mostrando 100 de 150"


def test_filter_options_keep_first_seen_order():
    assert filter_options(_products(), "category") == [ALL, "Office", "Home"]
    assert filter_options(_products(), "missing") == [ALL]
