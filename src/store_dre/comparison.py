# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period-over-period comparison of DRE reports.

This module runs the DRE builder twice (current and previous period) and
joins the two results per store to compute percentage deltas.

Join policy
-----------
Left join on the current-period rows, by store id. A store present only in
the previous period is not reported. A store absent from the previous
period is compared against zeros.

Percentage convention
---------------------
For every metric::

    previous == 0  ->  change = 100.0
    otherwise      ->  change = (current - previous) / divisor * 100

where ``divisor`` is ``previous`` for revenue and expense, and
``abs(previous)`` for the net result so that the sign of the change stays
meaningful when the previous result was a loss. A zero baseline therefore
always reads as 100% growth, never as NaN or infinity.
"""

from collections.abc import Iterable
from typing import Optional

from .dre import build_dre_report
from .models import DREData, MomRow, Store, StoreClosing
from .periods import Period, month_period, previous_month_period

# Change reported when the previous value is zero.
ZERO_BASELINE_CHANGE = 100.0


def percent_change(
    current: float,
    previous: float,
    absolute_base: bool = False,
) -> float:
    """Percentage change from ``previous`` to ``current``.

    Args:
        current: Value for the current period.
        previous: Value for the previous period.
        absolute_base: Divide by ``abs(previous)`` instead of ``previous``.

    Returns:
        The change in percent, or ``ZERO_BASELINE_CHANGE`` when
        ``previous`` is zero.
    """
    if previous == 0:
        return ZERO_BASELINE_CHANGE
    divisor = abs(previous) if absolute_base else previous
    return (current - previous) / divisor * 100


def compare_reports(current: DREData, previous: DREData) -> list[MomRow]:
    """Join two DRE reports by store id and compute deltas.

    Rows follow the order of ``current.stores``.
    """
    prev_by_id = {row.store.id: row for row in previous.stores}

    out: list[MomRow] = []
    for row in current.stores:
        prev = prev_by_id.get(row.store.id)
        prev_revenue = prev.total_revenue if prev is not None else 0.0
        prev_expense = prev.total_expense if prev is not None else 0.0
        prev_result = prev.net_result if prev is not None else 0.0

        out.append(
            MomRow(
                store=row.store,
                closings=row.closings,
                total_revenue=row.total_revenue,
                total_expense=row.total_expense,
                net_result=row.net_result,
                prev_revenue=prev_revenue,
                prev_expense=prev_expense,
                prev_result=prev_result,
                revenue_change=percent_change(row.total_revenue, prev_revenue),
                expense_change=percent_change(row.total_expense, prev_expense),
                result_change=percent_change(
                    row.net_result, prev_result, absolute_base=True
                ),
            )
        )
    return out


def build_period_over_period_report(
    closings: Iterable[StoreClosing],
    stores: Iterable[Store],
    current: Period,
    previous: Period,
    store_id: Optional[str] = None,
) -> list[MomRow]:
    """Compare two arbitrary periods store by store.

    Args:
        closings: Closing snapshot.
        stores: Store catalog.
        current: Current period.
        previous: Period to compare against.
        store_id: Optional store filter applied to both periods.

    Returns:
        One MomRow per store with activity in the current period.
    """
    closings = list(closings)
    stores = list(stores)

    current_report = build_dre_report(
        closings, stores, current.start, current.end, store_id=store_id
    )
    previous_report = build_dre_report(
        closings, stores, previous.start, previous.end, store_id=store_id
    )
    return compare_reports(current_report, previous_report)


def build_month_over_month_report(
    closings: Iterable[StoreClosing],
    stores: Iterable[Store],
    month: int,
    year: int,
    store_id: Optional[str] = None,
) -> list[MomRow]:
    """Compare a calendar month with the calendar month before it.

    January is compared with December of the previous year.
    """
    return build_period_over_period_report(
        closings,
        stores,
        current=month_period(month, year),
        previous=previous_month_period(month, year),
        store_id=store_id,
    )
