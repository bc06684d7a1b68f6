# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Store DRE.

This module turns report value objects into pandas DataFrames ready to be
printed by the CLI. It never computes anything: figures come from the
report builders and are only rounded here, so that rounding stays a pure
presentation concern.

Every helper:
- rounds amounts and percentages to ``decimals``,
- returns a stable column order,
- returns an empty DataFrame that still carries its columns when there is
  nothing to show.
"""

from collections.abc import Iterable

import pandas as pd

from .models import (
    ClosingReconciliation,
    DREData,
    GoalProgress,
    MomRow,
    PaymentMethodBreakdown,
    Store,
    StoreEfficiency,
    StoreRanking,
    UnresolvedMovement,
)

CONSOLIDATED_LABEL = "Consolidated"

DRE_COLUMNS = ["store_id", "store", "closings", "revenue", "expense", "net_result"]
MOM_COLUMNS = [
    "store_id",
    "store",
    "revenue",
    "prev_revenue",
    "revenue_change_pct",
    "expense",
    "prev_expense",
    "expense_change_pct",
    "net_result",
    "prev_result",
    "result_change_pct",
]
RANKING_COLUMNS = [
    "rank",
    "store_id",
    "store",
    "closings",
    "revenue",
    "expense",
    "average_balance",
    "last_closing_date",
]
GOAL_COLUMNS = [
    "store_id",
    "store",
    "month",
    "year",
    "target_revenue",
    "current_revenue",
    "progress_pct",
    "remaining",
    "goal_met",
]
EFFICIENCY_COLUMNS = [
    "store_id",
    "store",
    "closings",
    "revenue",
    "revenue_per_closing",
    "cost_per_revenue_pct",
    "profit_margin_pct",
]
PAYMENT_COLUMNS = ["payment_method_id", "label", "movements", "amount"]
CONFIGURATION_ERROR_COLUMNS = [
    "closing_id",
    "movement_id",
    "movement_type_id",
    "amount",
]
RECONCILIATION_COLUMNS = [
    "closing_id",
    "balance_change",
    "net_result",
    "difference",
    "balanced",
]


def _empty(columns: list[str]) -> pd.DataFrame:
    return pd.DataFrame(columns=columns)


def dre_to_dataframe(report: DREData, decimals: int) -> pd.DataFrame:
    """
    Convert a DRE report into a table with one row per store.

    A final "Consolidated" row carries the report totals; it is only added
    when the report has at least one store row.
    """
    if not report.stores:
        return _empty(DRE_COLUMNS)

    rows: list[dict[str, object]] = []
    for r in report.stores:
        rows.append(
            {
                "store_id": r.store.id,
                "store": r.store.display_name,
                "closings": len(r.closings),
                "revenue": round(r.total_revenue, decimals),
                "expense": round(r.total_expense, decimals),
                "net_result": round(r.net_result, decimals),
            }
        )

    cons = report.consolidated
    rows.append(
        {
            "store_id": "",
            "store": CONSOLIDATED_LABEL,
            "closings": sum(len(r.closings) for r in report.stores),
            "revenue": round(cons.total_revenue, decimals),
            "expense": round(cons.total_expense, decimals),
            "net_result": round(cons.net_result, decimals),
        }
    )

    return pd.DataFrame(rows)[DRE_COLUMNS]


def mom_to_dataframe(rows: Iterable[MomRow], decimals: int) -> pd.DataFrame:
    """Convert month-over-month rows into a table (percentages in %)."""
    records = [
        {
            "store_id": r.store.id,
            "store": r.store.display_name,
            "revenue": round(r.total_revenue, decimals),
            "prev_revenue": round(r.prev_revenue, decimals),
            "revenue_change_pct": round(r.revenue_change, decimals),
            "expense": round(r.total_expense, decimals),
            "prev_expense": round(r.prev_expense, decimals),
            "expense_change_pct": round(r.expense_change, decimals),
            "net_result": round(r.net_result, decimals),
            "prev_result": round(r.prev_result, decimals),
            "result_change_pct": round(r.result_change, decimals),
        }
        for r in rows
    ]
    if not records:
        return _empty(MOM_COLUMNS)
    return pd.DataFrame(records)[MOM_COLUMNS]


def rankings_to_dataframe(
    rankings: Iterable[StoreRanking], decimals: int
) -> pd.DataFrame:
    """Convert rankings into a table. ``rank`` follows the given order."""
    records = []
    for position, r in enumerate(rankings, start=1):
        records.append(
            {
                "rank": position,
                "store_id": r.store.id,
                "store": r.store.display_name,
                "closings": r.total_closings,
                "revenue": round(r.total_revenue, decimals),
                "expense": round(r.total_expense, decimals),
                "average_balance": round(r.average_balance, decimals),
                "last_closing_date": (
                    r.last_closing_date.isoformat() if r.last_closing_date else ""
                ),
            }
        )
    if not records:
        return _empty(RANKING_COLUMNS)
    return pd.DataFrame(records)[RANKING_COLUMNS]


def goals_to_dataframe(
    progress: Iterable[GoalProgress],
    stores: Iterable[Store],
    decimals: int,
) -> pd.DataFrame:
    """Convert goal progress into a table.

    Store names come from the catalog; goals of unknown stores show their
    raw id.
    """
    names = {s.id: s.display_name for s in stores}
    records = [
        {
            "store_id": p.goal.store_id,
            "store": names.get(p.goal.store_id, p.goal.store_id),
            "month": p.goal.month,
            "year": p.goal.year,
            "target_revenue": round(p.goal.target_revenue, decimals),
            "current_revenue": round(p.current_revenue, decimals),
            "progress_pct": round(p.progress_percent, decimals),
            "remaining": round(p.remaining, decimals),
            "goal_met": p.goal_met,
        }
        for p in progress
    ]
    if not records:
        return _empty(GOAL_COLUMNS)
    return pd.DataFrame(records)[GOAL_COLUMNS]


def efficiency_to_dataframe(
    efficiency: Iterable[StoreEfficiency], decimals: int
) -> pd.DataFrame:
    records = [
        {
            "store_id": e.store.id,
            "store": e.store.display_name,
            "closings": e.closings_count,
            "revenue": round(e.total_revenue, decimals),
            "revenue_per_closing": round(e.revenue_per_closing, decimals),
            "cost_per_revenue_pct": round(e.cost_per_revenue, decimals),
            "profit_margin_pct": round(e.profit_margin, decimals),
        }
        for e in efficiency
    ]
    if not records:
        return _empty(EFFICIENCY_COLUMNS)
    return pd.DataFrame(records)[EFFICIENCY_COLUMNS]


def payment_breakdown_to_dataframe(
    breakdown: Iterable[PaymentMethodBreakdown], decimals: int
) -> pd.DataFrame:
    records = [
        {
            "payment_method_id": b.payment_method_id,
            "label": b.label,
            "movements": b.movements_count,
            "amount": round(b.total_amount, decimals),
        }
        for b in breakdown
    ]
    if not records:
        return _empty(PAYMENT_COLUMNS)
    return pd.DataFrame(records)[PAYMENT_COLUMNS]


def reconciliations_to_dataframe(
    reconciliations: Iterable[ClosingReconciliation], decimals: int
) -> pd.DataFrame:
    records = [
        {
            "closing_id": r.closing_id,
            "balance_change": round(r.balance_change, decimals),
            "net_result": round(r.net_result, decimals),
            "difference": round(r.difference, decimals),
            "balanced": r.is_balanced,
        }
        for r in reconciliations
    ]
    if not records:
        return _empty(RECONCILIATION_COLUMNS)
    return pd.DataFrame(records)[RECONCILIATION_COLUMNS]


def configuration_errors_to_dataframe(
    errors: Iterable[UnresolvedMovement], decimals: int
) -> pd.DataFrame:
    """List the movements excluded from totals because of an unknown type."""
    records = [
        {
            "closing_id": u.closing_id,
            "movement_id": u.movement_id,
            "movement_type_id": u.movement_type_id,
            "amount": round(u.amount, decimals),
        }
        for u in errors
    ]
    if not records:
        return _empty(CONFIGURATION_ERROR_COLUMNS)
    return pd.DataFrame(records)[CONFIGURATION_ERROR_COLUMNS]
