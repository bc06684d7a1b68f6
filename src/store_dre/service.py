# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
High-level reporting service bound to a snapshot.

This module sits between:
- the pure report builders (totals.py, dre.py, comparison.py, rankings.py,
  goals.py), which all take the snapshot as explicit arguments, and
- user-facing layers such as the CLI, which only know about report
  parameters (dates, month, store filter).

A ReportService wraps one immutable Snapshot and exposes the reporting
operations without a snapshot argument:

    compute_closing_totals(movements)
    build_dre_report(start, end, store_id=None)
    build_month_over_month_report(month, year, store_id=None)
    build_store_rankings()
    compute_goal_progress(goal)
    configuration_errors(store_id=None)

Memoization
-----------
Results are cached in a bounded LRU keyed by
(snapshot fingerprint, operation, arguments). The fingerprint is a SHA-256
digest of the snapshot's canonical representation, so two services built
on equal snapshots produce equal keys, and a fresh snapshot never reuses
results computed on a stale one.

The service holds no mutable state other than the cache. Cache access is
guarded by a lock, so one service may be shared between threads; two
threads asking for the same missing entry may both compute it. It never mutates
the snapshot; use ``with_snapshot()`` to report on newer data.
"""

import hashlib
import logging
import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from . import comparison, dre, goals, rankings, totals
from .models import (
    ClosingTotals,
    DREData,
    GoalProgress,
    MomRow,
    MovementItem,
    Snapshot,
    StoreMeta,
    StoreRanking,
    UnresolvedMovement,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 128


@dataclass(frozen=True)
class CacheInfo:
    """Cache statistics of a ReportService."""

    hits: int
    misses: int
    size: int
    max_size: int


def snapshot_fingerprint(snapshot: Snapshot) -> str:
    """Return a content hash of a snapshot."""
    return hashlib.sha256(repr(snapshot).encode("utf-8")).hexdigest()


class ReportService:
    """Memoized reporting operations over one snapshot."""

    def __init__(self, snapshot: Snapshot, cache_size: int = DEFAULT_CACHE_SIZE):
        if cache_size < 0:
            raise ValueError("cache_size must be zero or positive.")
        self.snapshot = snapshot
        self.fingerprint = snapshot_fingerprint(snapshot)
        self._max_size = int(cache_size)
        self._cache: OrderedDict[Hashable, Any] = OrderedDict()
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Cache plumbing
    # ------------------------------------------------------------------

    def _memoized(self, key: tuple, compute: Callable[[], Any]) -> Any:
        full_key = (self.fingerprint,) + key
        with self._lock:
            if full_key in self._cache:
                self._hits += 1
                self._cache.move_to_end(full_key)
                return self._cache[full_key]
            self._misses += 1

        logger.debug("Computing %s for snapshot %s", key[0], self.fingerprint[:12])
        value = compute()
        if self._max_size > 0:
            with self._lock:
                self._cache[full_key] = value
                self._cache.move_to_end(full_key)
                while len(self._cache) > self._max_size:
                    self._cache.popitem(last=False)
        return value

    def cache_info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(
                hits=self._hits,
                misses=self._misses,
                size=len(self._cache),
                max_size=self._max_size,
            )

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def with_snapshot(self, snapshot: Snapshot) -> "ReportService":
        """Return a new service bound to ``snapshot`` with an empty cache."""
        return ReportService(snapshot, cache_size=self._max_size)

    # ------------------------------------------------------------------
    # Reporting operations
    # ------------------------------------------------------------------

    def compute_closing_totals(self, movements: Sequence[MovementItem]) -> ClosingTotals:
        """Totals of a movement list, resolved against the snapshot's catalog."""
        movements = tuple(movements)
        return self._memoized(
            ("closing_totals", movements),
            lambda: totals.compute_closing_totals(
                movements, self.snapshot.movement_types
            ),
        )

    def build_dre_report(
        self,
        start: date,
        end: date,
        store_id: Optional[str] = None,
    ) -> DREData:
        return self._memoized(
            ("dre", start, end, store_id),
            lambda: dre.build_dre_report(
                self.snapshot.closings,
                self.snapshot.stores,
                start,
                end,
                store_id=store_id,
            ),
        )

    def build_month_over_month_report(
        self,
        month: int,
        year: int,
        store_id: Optional[str] = None,
    ) -> list[MomRow]:
        rows = self._memoized(
            ("mom", month, year, store_id),
            lambda: tuple(
                comparison.build_month_over_month_report(
                    self.snapshot.closings,
                    self.snapshot.stores,
                    month,
                    year,
                    store_id=store_id,
                )
            ),
        )
        return list(rows)

    def build_store_rankings(self) -> list[StoreRanking]:
        rows = self._memoized(
            ("rankings",),
            lambda: tuple(
                rankings.build_store_rankings(
                    self.snapshot.closings, self.snapshot.stores
                )
            ),
        )
        return list(rows)

    def compute_goal_progress(self, goal: StoreMeta) -> GoalProgress:
        return self._memoized(
            ("goal", goal),
            lambda: goals.compute_goal_progress(goal, self.snapshot.closings),
        )

    def goals_progress(self, month: int, year: int) -> list[GoalProgress]:
        """Progress of every snapshot goal defined for (month, year)."""
        return [
            self.compute_goal_progress(g)
            for g in goals.goals_for_month(self.snapshot.goals, month, year)
        ]

    def configuration_errors(
        self, store_id: Optional[str] = None
    ) -> list[UnresolvedMovement]:
        """Movements of the snapshot excluded from totals (unknown types).

        Listed in closing order, optionally for one store only.
        """
        return [
            u
            for c in self.snapshot.closings
            if store_id is None or c.store_id == store_id
            for u in c.configuration_errors
        ]
