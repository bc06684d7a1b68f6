# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
DRE (Demonstrativo de Resultado do Exercício) report builder.

The DRE is an income-statement style summary: revenue minus expense equals
net result, for a period and optionally a single store.

``build_dre_report()`` works on closing snapshots whose derived totals are
already consistent (see totals.py). It does not re-derive anything from the
movements; it only selects closings and sums their totals:

1. Keep closings dated within [start, end] (inclusive) and, when a store
   filter is given, belonging to that store.
2. Candidate stores are the filtered store, or the whole catalog.
3. For each candidate store, sum total_revenue and total_expense over its
   selected closings; net_result = revenue - expense.
4. Stores without any selected closing are dropped from the rows.
5. The consolidated row is accumulated from the surviving rows, in row
   order, so that consolidated == SUM(rows) holds exactly.
6. The period label renders the window as 'DD/MM/YYYY - DD/MM/YYYY'.
7. Movements excluded from the selected closings because of an unknown
   movement type are reported in ``DREData.configuration_errors``.

An empty window, an unknown store or an inverted window (start > end) all
produce an empty report with a zero consolidated row.
"""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Optional

from .models import DREConsolidated, DREData, DREStoreRow, Store, StoreClosing
from .periods import Period, as_date, filter_closings_by_period, format_period_label

logger = logging.getLogger(__name__)


def build_store_row(store: Store, closings: Iterable[StoreClosing]) -> DREStoreRow:
    """Sum the closing totals of one store into a DRE row."""
    selected = tuple(closings)
    total_revenue = 0.0
    total_expense = 0.0
    for c in selected:
        total_revenue += c.total_revenue
        total_expense += c.total_expense

    return DREStoreRow(
        store=store,
        closings=selected,
        total_revenue=total_revenue,
        total_expense=total_expense,
        net_result=total_revenue - total_expense,
    )


def consolidate(rows: Iterable[DREStoreRow]) -> DREConsolidated:
    """Element-wise sum of DRE rows."""
    total_revenue = 0.0
    total_expense = 0.0
    net_result = 0.0
    for r in rows:
        total_revenue += r.total_revenue
        total_expense += r.total_expense
        net_result += r.net_result

    return DREConsolidated(
        total_revenue=total_revenue,
        total_expense=total_expense,
        net_result=net_result,
    )


def build_dre_report(
    closings: Iterable[StoreClosing],
    stores: Iterable[Store],
    start: date,
    end: date,
    store_id: Optional[str] = None,
) -> DREData:
    """Build the DRE report for a date window and optional store.

    Args:
        closings: Closing snapshot (derived totals already computed).
        stores: Store catalog. Row order follows catalog order.
        start: First day of the window (inclusive).
        end: Last day of the window (inclusive).
        store_id: Optional store filter.

    Returns:
        A DREData value object.

    Raises:
        TypeError: if ``start`` or ``end`` is not a date. ``datetime``
            bounds are truncated to their calendar day.
    """
    start = as_date(start, "DRE window start")
    end = as_date(end, "DRE window end")

    period = Period(start=start, end=end, label=format_period_label(start, end))

    # 1) Select closings within the window (and store, if filtered).
    selected = filter_closings_by_period(closings, period, store_id=store_id)

    # 2) Candidate stores.
    catalog = list(stores)
    if store_id is not None:
        candidates = [s for s in catalog if s.id == store_id]
    else:
        candidates = catalog

    # 3) Group selected closings by store, preserving closing order.
    by_store: dict[str, list[StoreClosing]] = {}
    for c in selected:
        by_store.setdefault(c.store_id, []).append(c)

    # 4) Build one row per store with activity in the window.
    rows = tuple(
        build_store_row(s, by_store[s.id]) for s in candidates if by_store.get(s.id)
    )

    orphaned = set(by_store) - {s.id for s in candidates}
    if orphaned:
        logger.warning(
            "Closings ignored in DRE %s: unknown store ids %s",
            period.label,
            ", ".join(sorted(orphaned)),
        )

    logger.info(
        "DRE %s: %d closings, %d store rows", period.label, len(selected), len(rows)
    )

    # 5) Unresolved movements of the reported closings.
    errors = tuple(
        u for r in rows for c in r.closings for u in c.configuration_errors
    )
    if errors:
        logger.warning(
            "DRE %s: %d movement(s) excluded for unknown movement types",
            period.label,
            len(errors),
        )

    # 6) Consolidated totals from the surviving rows.
    return DREData(
        period=period.label,
        stores=rows,
        consolidated=consolidate(rows),
        configuration_errors=errors,
    )
