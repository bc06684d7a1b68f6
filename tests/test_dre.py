from datetime import date, datetime

import pytest

from store_dre.dre import build_dre_report, consolidate
from store_dre.models import MovementItem, MovementType, Store
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


def _closing(cid: str, store_id: str, d: date, revenue: float, expense: float):
    movements = [
        MovementItem(id=f"{cid}-r", description="", amount=revenue, movement_type_id="sale"),
        MovementItem(
            id=f"{cid}-e", description="", amount=expense, movement_type_id="supplier"
        ),
    ]
    return make_closing(cid, store_id, d, movements, TYPES)


CLOSINGS = (
    _closing("1", "a", date(2025, 1, 10), 1000.0, 250.0),
    _closing("2", "a", date(2025, 1, 20), 500.0, 150.0),
    _closing("3", "b", date(2025, 1, 15), 300.10, 100.20),
    _closing("4", "a", date(2025, 2, 2), 800.0, 50.0),
)


def test_single_store_month_report() -> None:
    """Store A in January: 1500 revenue, 400 expense, 1100 net."""
    report = build_dre_report(
        CLOSINGS, STORES, date(2025, 1, 1), date(2025, 1, 31), store_id="a"
    )

    assert report.period == "01/01/2025 - 31/01/2025"
    assert len(report.stores) == 1
    row = report.stores[0]
    assert row.store.id == "a"
    assert [c.id for c in row.closings] == ["1", "2"]
    assert row.total_revenue == pytest.approx(1500.0)
    assert row.total_expense == pytest.approx(400.0)
    assert row.net_result == pytest.approx(1100.0)

    cons = report.consolidated
    assert (cons.total_revenue, cons.total_expense, cons.net_result) == (
        row.total_revenue,
        row.total_expense,
        row.net_result,
    )


def test_consolidated_equals_sum_of_rows_exactly() -> None:
    report = build_dre_report(CLOSINGS, STORES, date(2025, 1, 1), date(2025, 2, 28))

    assert report.consolidated == consolidate(report.stores)
    assert report.consolidated.total_revenue == sum(
        r.total_revenue for r in report.stores
    )
    assert report.consolidated.net_result == (
        report.stores[0].net_result + report.stores[1].net_result
    )


def test_rows_follow_catalog_order_and_skip_inactive_stores() -> None:
    reversed_catalog = tuple(reversed(STORES))
    report = build_dre_report(
        CLOSINGS, reversed_catalog, date(2025, 1, 1), date(2025, 1, 31)
    )

    assert [r.store.id for r in report.stores] == ["b", "a"]


def test_report_is_idempotent() -> None:
    args = (CLOSINGS, STORES, date(2025, 1, 1), date(2025, 1, 31))
    assert build_dre_report(*args) == build_dre_report(*args)


@pytest.mark.parametrize(
    "start, end, store_id",
    [
        (date(2024, 1, 1), date(2024, 1, 31), None),
        (date(2025, 1, 31), date(2025, 1, 1), None),
        (date(2025, 1, 1), date(2025, 1, 31), "unknown"),
        (date(2025, 1, 1), date(2025, 1, 31), "c"),
    ],
)
def test_empty_reports_have_zero_consolidated(start, end, store_id) -> None:
    report = build_dre_report(CLOSINGS, STORES, start, end, store_id=store_id)

    assert report.stores == ()
    assert report.consolidated.total_revenue == 0.0
    assert report.consolidated.total_expense == 0.0
    assert report.consolidated.net_result == 0.0


def test_window_bounds_must_be_dates() -> None:
    with pytest.raises(TypeError):
        build_dre_report(CLOSINGS, STORES, "2025-01-01", date(2025, 1, 31))


def test_closings_of_unknown_stores_are_ignored(caplog) -> None:
    orphan = _closing("9", "zzz", date(2025, 1, 12), 50.0, 0.0)

    with caplog.at_level("WARNING", logger="store_dre.dre"):
        report = build_dre_report(
            CLOSINGS + (orphan,), STORES, date(2025, 1, 1), date(2025, 1, 31)
        )

    assert [r.store.id for r in report.stores] == ["a", "b"]
    assert "zzz" in caplog.text


def test_march_scenario_exact_values() -> None:
    closings = (
        _closing("m1", "a", date(2024, 3, 5), 1000.0, 300.0),
        _closing("m2", "a", date(2024, 3, 25), 500.0, 100.0),
    )

    report = build_dre_report(
        closings, STORES, date(2024, 3, 1), date(2024, 3, 31), store_id="a"
    )

    row = report.stores[0]
    assert (row.total_revenue, row.total_expense, row.net_result) == (
        1500.0,
        400.0,
        1100.0,
    )
    assert report.consolidated.total_revenue == 1500.0
    assert report.consolidated.total_expense == 400.0
    assert report.consolidated.net_result == 1100.0


def test_datetime_bounds_are_truncated_to_their_day() -> None:
    with_dates = build_dre_report(CLOSINGS, STORES, date(2025, 1, 1), date(2025, 1, 31))
    with_datetimes = build_dre_report(
        CLOSINGS,
        STORES,
        datetime(2025, 1, 1, 8, 30),
        datetime(2025, 1, 31, 23, 59),
    )

    assert with_dates.stores
    assert with_datetimes == with_dates
