from datetime import date

import pytest

from store_dre.models import MovementItem, MovementType, Store
from store_dre.rankings import build_store_rankings, sort_rankings
from store_dre.totals import make_closing

TYPES = (
    MovementType(id="sale", name="Sales", category="revenue"),
    MovementType(id="supplier", name="Supplier", category="expense"),
)

STORES = (
    Store(id="a", name="Store A"),
    Store(id="b", name="Store B"),
    Store(id="c", name="Store C"),
)


def _closing(cid, store_id, d, revenue, expense, initial, final):
    movements = [
        MovementItem(id="r", description="", amount=revenue, movement_type_id="sale"),
        MovementItem(id="e", description="", amount=expense, movement_type_id="supplier"),
    ]
    return make_closing(
        cid,
        store_id,
        d,
        movements,
        TYPES,
        initial_balance=initial,
        final_balance=final,
    )


CLOSINGS = (
    _closing("1", "a", date(2025, 1, 10), 1000.0, 200.0, 100.0, 300.0),
    _closing("2", "a", date(2025, 3, 2), 500.0, 100.0, 300.0, 500.0),
    _closing("3", "c", date(2024, 11, 5), 2000.0, 900.0, 1000.0, 1000.0),
)


def test_one_row_per_store_in_catalog_order() -> None:
    rankings = build_store_rankings(CLOSINGS, STORES)
    assert [r.store.id for r in rankings] == ["a", "b", "c"]


def test_store_without_closings_has_zero_row() -> None:
    """A store with no history still appears, with zero figures."""
    b = build_store_rankings(CLOSINGS, STORES)[1]

    assert b.store.id == "b"
    assert b.total_closings == 0
    assert b.total_revenue == 0.0
    assert b.total_expense == 0.0
    assert b.average_balance == 0.0
    assert b.last_closing_date is None


def test_lifetime_metrics() -> None:
    a = build_store_rankings(CLOSINGS, STORES)[0]

    assert a.total_closings == 2
    assert a.total_revenue == pytest.approx(1500.0)
    assert a.total_expense == pytest.approx(300.0)
    # (100 + 300 + 300 + 500) / (2 * 2)
    assert a.average_balance == pytest.approx(300.0)
    assert a.last_closing_date == date(2025, 3, 2)


def test_sort_rankings_descending_and_stable() -> None:
    rankings = build_store_rankings(CLOSINGS, STORES)

    by_revenue = sort_rankings(rankings, "total_revenue")
    assert [r.store.id for r in by_revenue] == ["c", "a", "b"]

    by_closings = sort_rankings(rankings, "total_closings")
    assert [r.store.id for r in by_closings] == ["a", "c", "b"]

    by_balance = sort_rankings(rankings, "average_balance")
    assert [r.store.id for r in by_balance] == ["c", "a", "b"]


def test_sort_rankings_rejects_unknown_key() -> None:
    with pytest.raises(ValueError):
        sort_rankings([], "profit")


def test_empty_catalog_gives_no_rankings() -> None:
    assert build_store_rankings(CLOSINGS, ()) == []
