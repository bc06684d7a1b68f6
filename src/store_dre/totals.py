# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Closing totals calculator for Store DRE.

This module reduces the movements of a closing into the four derived
figures every report consumes:

    total_revenue = SUM(amount - discount) over 'revenue' movements
    total_expense = SUM(amount)            over 'expense' movements
    total_other   = SUM(amount)            over 'other' movements
    net_result    = total_revenue - total_expense

Discounts only reduce recognized revenue. They are ignored on expense and
other movements.

Key components
--------------
- compute_closing_totals(movements, movement_types) :
    Pure and idempotent reduction of a movement list. Movements whose type
    cannot be resolved are excluded from the totals and returned in
    ``ClosingTotals.unresolved`` so the caller can surface the
    configuration problem. One bad record never aborts a whole report.

- make_closing(...) / refresh_closing(closing, movement_types) :
    The only supported ways to obtain a StoreClosing whose derived fields
    are consistent with its movements. Whenever the movement list changes,
    the closing must go through ``refresh_closing`` again; derived fields
    are never patched individually.

- reconcile_closing(closing) :
    Compares the declared physical cash variation (final - initial balance)
    with the movement-derived net result. Both values are kept distinct:
    the balance difference is a reconciliation check, not an alternate
    definition of ``net_result``.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import date
from typing import Optional

from .categories import UnknownMovementTypeError, build_category_index, resolve_category
from .models import (
    CATEGORY_EXPENSE,
    CATEGORY_REVENUE,
    ClosingReconciliation,
    ClosingTotals,
    MovementItem,
    MovementType,
    StoreClosing,
    UnresolvedMovement,
)

logger = logging.getLogger(__name__)

# Differences below half a cent are considered rounding noise when
# reconciling balances.
RECONCILIATION_TOLERANCE = 0.005


def compute_closing_totals(
    movements: Sequence[MovementItem],
    movement_types: Iterable[MovementType],
) -> ClosingTotals:
    """Reduce a list of movements into closing totals.

    Steps:
        1. Build a category index from the movement type catalog.
        2. Resolve each movement's category; unknown references are
           recorded as unresolved and skipped.
        3. Accumulate revenue (net of discount), expense and other amounts.
        4. Derive net_result = total_revenue - total_expense.

    Args:
        movements: Ordered movements of one closing.
        movement_types: MovementType catalog.

    Returns:
        A ClosingTotals instance. ``unresolved`` lists every movement that
        was excluded because of an unknown movement type.
    """
    index = build_category_index(movement_types)

    total_revenue = 0.0
    total_expense = 0.0
    total_other = 0.0
    unresolved: list[UnresolvedMovement] = []

    for m in movements:
        try:
            category = resolve_category(m.movement_type_id, index)
        except UnknownMovementTypeError as exc:
            logger.warning("Movement %s excluded from totals: %s", m.id, exc)
            unresolved.append(
                UnresolvedMovement(
                    movement_id=m.id,
                    movement_type_id=exc.movement_type_id,
                    amount=float(m.amount),
                )
            )
            continue

        amount = float(m.amount)
        if category == CATEGORY_REVENUE:
            total_revenue += amount - float(m.discount or 0.0)
        elif category == CATEGORY_EXPENSE:
            total_expense += amount
        else:
            total_other += amount

    return ClosingTotals(
        total_revenue=total_revenue,
        total_expense=total_expense,
        total_other=total_other,
        net_result=total_revenue - total_expense,
        unresolved=tuple(unresolved),
    )


def refresh_closing(
    closing: StoreClosing,
    movement_types: Iterable[MovementType],
) -> StoreClosing:
    """Return a copy of ``closing`` with derived totals recomputed.

    Movements excluded because of an unknown type are kept on the copy as
    ``configuration_errors``, tagged with the closing id.
    """
    totals = compute_closing_totals(closing.movements, movement_types)
    return replace(
        closing,
        total_revenue=totals.total_revenue,
        total_expense=totals.total_expense,
        total_other=totals.total_other,
        net_result=totals.net_result,
        configuration_errors=tuple(
            replace(u, closing_id=closing.id) for u in totals.unresolved
        ),
    )


def make_closing(
    closing_id: str,
    store_id: str,
    closing_date: date,
    movements: Iterable[MovementItem],
    movement_types: Iterable[MovementType],
    initial_balance: float = 0.0,
    final_balance: float = 0.0,
) -> StoreClosing:
    """Build a StoreClosing whose derived fields match its movements.

    Raises:
        TypeError: if ``closing_date`` is not a date.
    """
    if not isinstance(closing_date, date):
        raise TypeError(
            f"closing_date must be a date, got {type(closing_date).__name__}."
        )

    closing = StoreClosing(
        id=str(closing_id),
        store_id=str(store_id),
        closing_date=closing_date,
        initial_balance=float(initial_balance),
        final_balance=float(final_balance),
        movements=tuple(movements),
    )
    return refresh_closing(closing, movement_types)


def reconcile_closing(
    closing: StoreClosing,
    tolerance: Optional[float] = None,
) -> ClosingReconciliation:
    """Compare the declared cash variation with the movement-derived result.

    Args:
        closing: Closing to check.
        tolerance: Absolute difference accepted as balanced. Defaults to
            ``RECONCILIATION_TOLERANCE``.

    Returns:
        A ClosingReconciliation where ``difference`` is
        ``balance_change - net_result``.
    """
    tol = RECONCILIATION_TOLERANCE if tolerance is None else float(tolerance)
    balance_change = closing.balance_change
    difference = balance_change - closing.net_result
    return ClosingReconciliation(
        closing_id=closing.id,
        balance_change=balance_change,
        net_result=closing.net_result,
        difference=difference,
        is_balanced=abs(difference) <= tol,
    )
