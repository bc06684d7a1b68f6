# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Lifetime store rankings.

Unlike the DRE builder, rankings are computed over the whole closing
history (no date filter) and contain one row for *every* store of the
catalog. A store without closings still gets a row, with all figures at
zero and no last closing date.

For a store with closings::

    total_revenue   = SUM(closing.total_revenue)
    total_expense   = SUM(closing.total_expense)
    average_balance = (SUM(initial_balance) + SUM(final_balance))
                      / (2 * total_closings)
    last_closing_date = MAX(closing_date)
"""

from collections.abc import Iterable

from .models import Store, StoreClosing, StoreRanking

# Sort keys accepted by sort_rankings().
RANKING_SORT_KEYS: tuple[str, ...] = (
    "total_revenue",
    "total_closings",
    "total_expense",
    "average_balance",
)


def build_store_ranking(store: Store, closings: list[StoreClosing]) -> StoreRanking:
    """Aggregate the lifetime metrics of one store."""
    total_closings = len(closings)
    if total_closings == 0:
        return StoreRanking(
            store=store,
            total_closings=0,
            total_revenue=0.0,
            total_expense=0.0,
            average_balance=0.0,
            last_closing_date=None,
        )

    total_revenue = 0.0
    total_expense = 0.0
    total_initial = 0.0
    total_final = 0.0
    for c in closings:
        total_revenue += c.total_revenue
        total_expense += c.total_expense
        total_initial += c.initial_balance
        total_final += c.final_balance

    return StoreRanking(
        store=store,
        total_closings=total_closings,
        total_revenue=total_revenue,
        total_expense=total_expense,
        average_balance=(total_initial + total_final) / (2 * total_closings),
        last_closing_date=max(c.closing_date for c in closings),
    )


def build_store_rankings(
    closings: Iterable[StoreClosing],
    stores: Iterable[Store],
) -> list[StoreRanking]:
    """Return one ranking row per catalog store, in catalog order."""
    by_store: dict[str, list[StoreClosing]] = {}
    for c in closings:
        by_store.setdefault(c.store_id, []).append(c)

    return [build_store_ranking(s, by_store.get(s.id, [])) for s in stores]


def sort_rankings(rankings: Iterable[StoreRanking], by: str) -> list[StoreRanking]:
    """Sort rankings in descending order of the given metric.

    Ties keep their original (catalog) order.

    Raises:
        ValueError: if ``by`` is not one of ``RANKING_SORT_KEYS``.
    """
    if by not in RANKING_SORT_KEYS:
        raise ValueError(
            f"Unknown ranking sort key: {by!r}. "
            f"Expected one of: {', '.join(RANKING_SORT_KEYS)}."
        )
    return sorted(rankings, key=lambda r: getattr(r, by), reverse=True)
