# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Complementary indicators built on top of the DRE report.

- build_store_efficiency(report):
    Per-store efficiency for the report period: revenue per closing,
    expense as a percentage of revenue and profit margin. Ratios based on
    revenue are 0 when the store had no revenue.

- build_payment_method_breakdown(...):
    Gross movement amounts grouped by payment method. This is purely
    informational: payment methods never affect closing totals.
"""

from collections.abc import Iterable
from datetime import date
from typing import Optional

from .models import (
    DREData,
    PaymentMethod,
    PaymentMethodBreakdown,
    StoreClosing,
    StoreEfficiency,
)
from .periods import Period, filter_closings_by_period, format_period_label

UNKNOWN_PAYMENT_METHOD_LABEL = "Unknown payment method"


def build_store_efficiency(report: DREData) -> list[StoreEfficiency]:
    """Compute efficiency indicators for each store row of a DRE report.

    Returns:
        One StoreEfficiency per report row, sorted by total revenue
        (descending).
    """
    out: list[StoreEfficiency] = []
    for row in report.stores:
        count = len(row.closings)
        revenue = row.total_revenue
        out.append(
            StoreEfficiency(
                store=row.store,
                closings_count=count,
                total_revenue=revenue,
                total_expense=row.total_expense,
                net_result=row.net_result,
                revenue_per_closing=revenue / count if count > 0 else 0.0,
                cost_per_revenue=row.total_expense / revenue * 100
                if revenue > 0
                else 0.0,
                profit_margin=row.net_result / revenue * 100 if revenue > 0 else 0.0,
            )
        )

    out.sort(key=lambda e: e.total_revenue, reverse=True)
    return out


def build_payment_method_breakdown(
    closings: Iterable[StoreClosing],
    payment_methods: Iterable[PaymentMethod],
    start: date,
    end: date,
    store_id: Optional[str] = None,
) -> list[PaymentMethodBreakdown]:
    """Group the movements of a window by payment method.

    Amounts are gross (discounts are not subtracted) and all categories are
    included. Movements referencing an unknown payment method are grouped
    under ``UNKNOWN_PAYMENT_METHOD_LABEL`` with their original id.

    Returns:
        Catalog payment methods first (catalog order, only those used),
        then unknown ids in order of first appearance.
    """
    period = Period(start=start, end=end, label=format_period_label(start, end))
    selected = filter_closings_by_period(closings, period, store_id=store_id)

    labels = {pm.id: pm.name for pm in payment_methods}

    counts: dict[str, int] = {}
    totals: dict[str, float] = {}
    for c in selected:
        for m in c.movements:
            key = m.payment_method_id
            counts[key] = counts.get(key, 0) + 1
            totals[key] = totals.get(key, 0.0) + float(m.amount)

    known = [pm_id for pm_id in labels if pm_id in counts]
    unknown = [pm_id for pm_id in counts if pm_id not in labels]

    return [
        PaymentMethodBreakdown(
            payment_method_id=pm_id,
            label=labels.get(pm_id, UNKNOWN_PAYMENT_METHOD_LABEL),
            movements_count=counts[pm_id],
            total_amount=totals[pm_id],
        )
        for pm_id in known + unknown
    ]
