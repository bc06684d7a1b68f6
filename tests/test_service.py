from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from store_dre.models import (
    MovementItem,
    MovementType,
    Snapshot,
    Store,
    StoreMeta,
)
from store_dre.service import ReportService, snapshot_fingerprint
from store_dre.totals import make_closing

TYPES = (
    MovementType(id="sale", name="Sales", category="revenue"),
    MovementType(id="supplier", name="Supplier", category="expense"),
)
STORES = (Store(id="a", name="Store A", is_default=True), Store(id="b", name="Store B"))


def _closing(cid: str, store_id: str, d: date, revenue: float):
    movements = [
        MovementItem(id="r", description="", amount=revenue, movement_type_id="sale")
    ]
    return make_closing(cid, store_id, d, movements, TYPES)


def _snapshot(*closings, goals=()) -> Snapshot:
    return Snapshot(
        stores=STORES,
        movement_types=TYPES,
        closings=tuple(closings),
        goals=tuple(goals),
    )


def test_fingerprint_depends_on_content_only() -> None:
    s1 = _snapshot(_closing("1", "a", date(2025, 1, 10), 100.0))
    s2 = _snapshot(_closing("1", "a", date(2025, 1, 10), 100.0))
    s3 = _snapshot(_closing("1", "a", date(2025, 1, 10), 101.0))

    assert snapshot_fingerprint(s1) == snapshot_fingerprint(s2)
    assert snapshot_fingerprint(s1) != snapshot_fingerprint(s3)


def test_repeated_reports_are_served_from_cache() -> None:
    service = ReportService(_snapshot(_closing("1", "a", date(2025, 1, 10), 100.0)))

    first = service.build_dre_report(date(2025, 1, 1), date(2025, 1, 31))
    second = service.build_dre_report(date(2025, 1, 1), date(2025, 1, 31))

    assert first is second
    info = service.cache_info()
    assert (info.hits, info.misses, info.size) == (1, 1, 1)


def test_cache_is_bounded() -> None:
    service = ReportService(_snapshot(), cache_size=2)

    for month in (1, 2, 3):
        service.build_month_over_month_report(month, 2025)

    assert service.cache_info().size == 2
    assert service.cache_info().misses == 3


def test_zero_cache_size_disables_memoization() -> None:
    service = ReportService(_snapshot(), cache_size=0)
    service.build_store_rankings()
    service.build_store_rankings()

    assert service.cache_info().hits == 0
    assert service.cache_info().size == 0


def test_negative_cache_size_is_rejected() -> None:
    with pytest.raises(ValueError):
        ReportService(_snapshot(), cache_size=-1)


def test_with_snapshot_reports_on_new_data() -> None:
    old = ReportService(_snapshot(_closing("1", "a", date(2025, 1, 10), 100.0)))
    old.build_dre_report(date(2025, 1, 1), date(2025, 1, 31))

    new = old.with_snapshot(
        _snapshot(
            _closing("1", "a", date(2025, 1, 10), 100.0),
            _closing("2", "a", date(2025, 1, 11), 50.0),
        )
    )
    report = new.build_dre_report(date(2025, 1, 1), date(2025, 1, 31))

    assert report.consolidated.total_revenue == pytest.approx(150.0)
    assert new.cache_info().hits == 0
    assert new.fingerprint != old.fingerprint


def test_service_operations_match_pure_builders() -> None:
    goal = StoreMeta(id="g", store_id="a", month=1, year=2025, target_revenue=200.0)
    service = ReportService(
        _snapshot(
            _closing("1", "a", date(2024, 12, 10), 100.0),
            _closing("2", "a", date(2025, 1, 10), 150.0),
            goals=[goal],
        )
    )

    rows = service.build_month_over_month_report(1, 2025)
    assert rows[0].revenue_change == pytest.approx(50.0)

    rankings = service.build_store_rankings()
    assert [r.total_closings for r in rankings] == [2, 0]

    progress = service.goals_progress(1, 2025)
    assert len(progress) == 1
    assert progress[0].progress_percent == pytest.approx(75.0)
    assert service.compute_goal_progress(goal) is progress[0]

    totals = service.compute_closing_totals(
        [MovementItem(id="x", description="", amount=10.0, movement_type_id="supplier")]
    )
    assert totals.total_expense == pytest.approx(10.0)


def test_clear_cache_resets_statistics() -> None:
    service = ReportService(_snapshot())
    service.build_store_rankings()
    service.build_store_rankings()
    service.clear_cache()

    info = service.cache_info()
    assert (info.hits, info.misses, info.size) == (0, 0, 0)


def test_service_can_be_shared_between_threads() -> None:
    service = ReportService(
        _snapshot(
            _closing("1", "a", date(2025, 1, 10), 100.0),
            _closing("2", "b", date(2025, 2, 10), 50.0),
        ),
        cache_size=2,
    )

    def run(i: int) -> float:
        month = i % 4 + 1
        report = service.build_dre_report(date(2025, month, 1), date(2025, month, 28))
        service.build_month_over_month_report(month, 2025)
        return report.consolidated.total_revenue

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(run, range(200)))

    assert results[0] == pytest.approx(100.0)
    assert results[1] == pytest.approx(50.0)
    info = service.cache_info()
    assert info.size <= 2
    assert info.hits + info.misses == 400
