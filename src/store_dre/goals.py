# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Monthly revenue goals (StoreMeta) and their progress tracking.

A goal targets the revenue of one store for one calendar month. Progress
compares the revenue realized by the store's closings of that month with
the target:

    progress_percent = 0                                   if target <= 0
                     = min(current / target * 100, 100)    otherwise

The percentage is capped at 100 to keep the scale bounded. Overachievement
is reported through ``GoalProgress.goal_met``.

Goal collections follow a single-goal-per-(store, month, year) rule:
``upsert_goal`` updates the target of an existing goal instead of adding a
duplicate.
"""

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Optional

from .models import GoalProgress, StoreClosing, StoreMeta

logger = logging.getLogger(__name__)


def validate_goal(goal: StoreMeta) -> None:
    """Check a goal before it is stored.

    Raises:
        ValueError: if the store is missing, the month is out of range or
            the target is not strictly positive.
    """
    if not goal.store_id:
        raise ValueError("A goal must reference a store.")
    if goal.month < 1 or goal.month > 12:
        raise ValueError(f"Invalid goal month: {goal.month!r}. Expected 1..12.")
    if goal.target_revenue <= 0:
        raise ValueError("Goal target revenue must be greater than zero.")


def realized_revenue(
    closings: Iterable[StoreClosing],
    store_id: str,
    month: int,
    year: int,
) -> float:
    """Sum the revenue of a store's closings dated in (month, year)."""
    total = 0.0
    for c in closings:
        if (
            c.store_id == store_id
            and c.closing_date.month == month
            and c.closing_date.year == year
        ):
            total += c.total_revenue
    return total


def progress_percentage(current: float, target: float) -> float:
    """Completion percentage, capped at 100 and 0 for non-positive targets."""
    if target <= 0:
        return 0.0
    return min(current / target * 100, 100.0)


def compute_goal_progress(
    goal: StoreMeta,
    closings: Iterable[StoreClosing],
) -> GoalProgress:
    """Compare a goal with the revenue realized in its month."""
    current = realized_revenue(closings, goal.store_id, goal.month, goal.year)
    target = float(goal.target_revenue)
    return GoalProgress(
        goal=goal,
        current_revenue=current,
        progress_percent=progress_percentage(current, target),
        goal_met=target > 0 and current >= target,
        remaining=max(target - current, 0.0),
    )


def find_goal(
    goals: Iterable[StoreMeta],
    store_id: str,
    month: int,
    year: int,
) -> Optional[StoreMeta]:
    """Return the goal of a store for (month, year), if any."""
    for g in goals:
        if g.key == (store_id, month, year):
            return g
    return None


def upsert_goal(
    goals: Iterable[StoreMeta],
    goal: StoreMeta,
    validate: bool = True,
) -> tuple[StoreMeta, ...]:
    """Add a goal, or update the target of the existing one for its month.

    The existing goal keeps its id and position; only ``target_revenue``
    changes.

    Args:
        goals: Current goals.
        goal: Goal to add or merge.
        validate: Run ``validate_goal`` first. Loaders of historical data
            disable it to accept goals stored with a zero target.

    Raises:
        ValueError: if ``validate`` is set and the goal is invalid.
    """
    if validate:
        validate_goal(goal)

    out: list[StoreMeta] = []
    updated = False
    for g in goals:
        if not updated and g.key == goal.key:
            out.append(replace(g, target_revenue=float(goal.target_revenue)))
            updated = True
            logger.info(
                "Goal %s updated for store %s (%02d/%d)",
                g.id,
                g.store_id,
                g.month,
                g.year,
            )
        else:
            out.append(g)

    if not updated:
        out.append(goal)
    return tuple(out)


def goals_for_month(
    goals: Iterable[StoreMeta],
    month: int,
    year: int,
) -> list[StoreMeta]:
    """Goals defined for the given (month, year)."""
    return [g for g in goals if g.month == month and g.year == year]
