from datetime import date

import pytest

from store_dre.dre import build_dre_report
from store_dre.insights import (
    UNKNOWN_PAYMENT_METHOD_LABEL,
    build_payment_method_breakdown,
    build_store_efficiency,
)
from store_dre.models import MovementItem, MovementType, PaymentMethod, Store
from store_dre.totals import make_closing

TYPES = (
    MovementType(id="sale", name="Sales", category="revenue"),
    MovementType(id="supplier", name="Supplier", category="expense"),
)
STORES = (Store(id="a", name="Store A"), Store(id="b", name="Store B"))
METHODS = (
    PaymentMethod(id="cash", name="Cash", type="cash"),
    PaymentMethod(id="pix", name="PIX", type="pix"),
)


def _m(mid, amount, type_id, method, discount=0.0):
    return MovementItem(
        id=mid,
        description="",
        amount=amount,
        movement_type_id=type_id,
        payment_method_id=method,
        discount=discount,
    )


CLOSINGS = (
    make_closing(
        "1",
        "a",
        date(2025, 1, 10),
        [_m("1", 1000.0, "sale", "pix", 100.0), _m("2", 300.0, "supplier", "cash")],
        TYPES,
    ),
    make_closing(
        "2",
        "a",
        date(2025, 1, 11),
        [_m("3", 100.0, "sale", "cash")],
        TYPES,
    ),
    make_closing(
        "3",
        "b",
        date(2025, 1, 12),
        [_m("4", 2000.0, "sale", "voucher"), _m("5", 2500.0, "supplier", "pix")],
        TYPES,
    ),
)


def test_store_efficiency_indicators() -> None:
    report = build_dre_report(CLOSINGS, STORES, date(2025, 1, 1), date(2025, 1, 31))

    efficiency = build_store_efficiency(report)

    # Sorted by revenue, descending
    assert [e.store.id for e in efficiency] == ["b", "a"]

    a = efficiency[1]
    assert a.closings_count == 2
    assert a.total_revenue == pytest.approx(1000.0)
    assert a.revenue_per_closing == pytest.approx(500.0)
    assert a.cost_per_revenue == pytest.approx(30.0)
    assert a.profit_margin == pytest.approx(70.0)

    b = efficiency[0]
    assert b.profit_margin == pytest.approx(-25.0)


def test_store_efficiency_without_revenue() -> None:
    closing = make_closing(
        "9", "a", date(2025, 1, 5), [_m("1", 50.0, "supplier", "cash")], TYPES
    )
    report = build_dre_report((closing,), STORES, date(2025, 1, 1), date(2025, 1, 31))

    e = build_store_efficiency(report)[0]

    assert e.revenue_per_closing == 0.0
    assert e.cost_per_revenue == 0.0
    assert e.profit_margin == 0.0


def test_payment_method_breakdown_groups_gross_amounts() -> None:
    breakdown = build_payment_method_breakdown(
        CLOSINGS, METHODS, date(2025, 1, 1), date(2025, 1, 31)
    )

    assert [b.payment_method_id for b in breakdown] == ["cash", "pix", "voucher"]
    cash, pix, voucher = breakdown
    assert cash.movements_count == 2
    assert cash.total_amount == pytest.approx(400.0)
    assert pix.total_amount == pytest.approx(3500.0)
    assert voucher.label == UNKNOWN_PAYMENT_METHOD_LABEL


def test_payment_method_breakdown_respects_store_and_window() -> None:
    breakdown = build_payment_method_breakdown(
        CLOSINGS, METHODS, date(2025, 1, 11), date(2025, 1, 31), store_id="a"
    )

    assert len(breakdown) == 1
    assert breakdown[0].payment_method_id == "cash"
    assert breakdown[0].total_amount == pytest.approx(100.0)
