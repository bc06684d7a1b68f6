# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Domain records and report value objects for Store DRE.

Two families of structures live here:

1) Input records
   --------------
   Plain immutable snapshots handed over by the persistence layer:

   - Store          : a physical store (identity + display fields).
   - MovementType   : a named category definition (revenue / expense / other).
   - PaymentMethod  : display metadata for how a movement was paid.
   - MovementItem   : one cash-flow line inside a closing.
   - StoreClosing   : one end-of-day reconciliation for one store.
   - StoreMeta      : a monthly revenue goal for one store.
   - Snapshot       : the full set of catalogs and closings at a point in time.

   The engine never mutates these records. Derived closing totals are always
   produced by ``totals.refresh_closing`` / ``totals.make_closing``.

2) Report value objects
   ---------------------
   Pure computed artifacts returned to callers and never persisted
   (ClosingTotals, DREData, MomRow, StoreRanking, GoalProgress, ...).

All amounts are plain floats. Rounding is a presentation concern handled by
``views.py``.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

# Semantic categories a MovementType can resolve to.
CATEGORY_REVENUE = "revenue"
CATEGORY_EXPENSE = "expense"
CATEGORY_OTHER = "other"
CATEGORIES: tuple[str, ...] = (CATEGORY_REVENUE, CATEGORY_EXPENSE, CATEGORY_OTHER)


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Store:
    """A store of the organization.

    Attributes:
        id: Stable identifier, immutable once created.
        name: Registered name.
        nickname: Optional short name used for display.
        code: Optional internal store code.
        icon: Display icon.
        is_default: Whether this is the organization's default store. At most
            one store in a catalog may hold the flag (see ``validate_stores``).
    """

    id: str
    name: str
    nickname: Optional[str] = None
    code: Optional[str] = None
    icon: str = ""
    is_default: bool = False

    @property
    def display_name(self) -> str:
        """Nickname when available, registered name otherwise."""
        return self.nickname or self.name


@dataclass(frozen=True)
class MovementType:
    """A movement category definition."""

    id: str
    name: str
    category: str
    color: str = ""
    icon: str = ""

    def __post_init__(self) -> None:
        if self.category not in CATEGORIES:
            raise ValueError(
                f"Invalid category {self.category!r} for movement type "
                f"{self.id!r}. Expected one of: {', '.join(CATEGORIES)}."
            )


@dataclass(frozen=True)
class PaymentMethod:
    """Payment method metadata. Informational only, never affects totals."""

    id: str
    name: str
    type: str = "other"
    color: str = ""
    icon: str = ""


@dataclass(frozen=True)
class MovementItem:
    """A single cash-flow line recorded inside a closing.

    Attributes:
        id: Identifier of the line within its closing.
        description: Free text.
        amount: Positive monetary value.
        discount: Discount granted on the line (>= 0). Only reduces
            recognized revenue; ignored for expense and other lines.
        movement_type_id: Reference to a MovementType.
        payment_method_id: Reference to a PaymentMethod.
    """

    id: str
    description: str
    amount: float
    movement_type_id: str
    payment_method_id: str = ""
    discount: float = 0.0


@dataclass(frozen=True)
class UnresolvedMovement:
    """A movement excluded from totals because its type is unknown.

    ``closing_id`` is filled in once the movement is attached to a closing.
    """

    movement_id: str
    movement_type_id: str
    amount: float
    closing_id: str = ""


@dataclass(frozen=True)
class StoreClosing:
    """One end-of-day cash reconciliation for one store.

    The derived fields (total_revenue, total_expense, total_other,
    net_result) must always equal the reduction of ``movements`` through the
    category resolver. Build instances with ``totals.make_closing`` or
    refresh them with ``totals.refresh_closing`` whenever movements change.

    ``configuration_errors`` lists the movements excluded from the totals
    because their movement type is unknown.
    """

    id: str
    store_id: str
    closing_date: date
    initial_balance: float
    final_balance: float
    movements: tuple[MovementItem, ...] = ()
    total_revenue: float = 0.0
    total_expense: float = 0.0
    total_other: float = 0.0
    net_result: float = 0.0
    configuration_errors: tuple[UnresolvedMovement, ...] = ()

    @property
    def balance_change(self) -> float:
        """Physical cash variation declared for the day (final - initial).

        This is a reconciliation figure, distinct from ``net_result`` which
        is derived from the recorded movements.
        """
        return self.final_balance - self.initial_balance


@dataclass(frozen=True)
class StoreMeta:
    """Monthly revenue goal of a store."""

    id: str
    store_id: str
    month: int
    year: int
    target_revenue: float

    @property
    def key(self) -> tuple[str, int, int]:
        """Uniqueness key: one goal per (store, month, year)."""
        return (self.store_id, self.month, self.year)


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of every record the engine consumes.

    Collections are tuples so that a snapshot is hashable and can be used
    as part of a cache key.
    """

    stores: tuple[Store, ...] = ()
    movement_types: tuple[MovementType, ...] = ()
    payment_methods: tuple[PaymentMethod, ...] = ()
    closings: tuple[StoreClosing, ...] = ()
    goals: tuple[StoreMeta, ...] = ()


# ---------------------------------------------------------------------------
# Report value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClosingTotals:
    """Totals derived from a list of movements."""

    total_revenue: float = 0.0
    total_expense: float = 0.0
    total_other: float = 0.0
    net_result: float = 0.0
    unresolved: tuple[UnresolvedMovement, ...] = ()

    @property
    def has_configuration_errors(self) -> bool:
        return bool(self.unresolved)


@dataclass(frozen=True)
class ClosingReconciliation:
    """Comparison between declared cash variation and recorded movements."""

    closing_id: str
    balance_change: float
    net_result: float
    difference: float
    is_balanced: bool


@dataclass(frozen=True)
class DREStoreRow:
    """Income-statement row for one store over a period."""

    store: Store
    closings: tuple[StoreClosing, ...]
    total_revenue: float
    total_expense: float
    net_result: float


@dataclass(frozen=True)
class DREConsolidated:
    """Element-wise sum of every store row of a report."""

    total_revenue: float = 0.0
    total_expense: float = 0.0
    net_result: float = 0.0


@dataclass(frozen=True)
class DREData:
    """DRE report: period label, per-store rows and consolidated totals.

    ``configuration_errors`` gathers the unresolved movements of every
    closing selected by the report.
    """

    period: str
    stores: tuple[DREStoreRow, ...] = ()
    consolidated: DREConsolidated = field(default_factory=DREConsolidated)
    configuration_errors: tuple[UnresolvedMovement, ...] = ()


@dataclass(frozen=True)
class MomRow:
    """A current-period DRE row joined with its previous-period values.

    The ``*_change`` attributes are percentages. A zero previous value
    yields exactly 100.0 (growth from a zero base), never NaN or infinity.
    """

    store: Store
    closings: tuple[StoreClosing, ...]
    total_revenue: float
    total_expense: float
    net_result: float
    prev_revenue: float
    prev_expense: float
    prev_result: float
    revenue_change: float
    expense_change: float
    result_change: float


@dataclass(frozen=True)
class StoreRanking:
    """Lifetime-to-date metrics of a store."""

    store: Store
    total_closings: int
    total_revenue: float
    total_expense: float
    average_balance: float
    last_closing_date: Optional[date] = None


@dataclass(frozen=True)
class GoalProgress:
    """Realized revenue of a store against its monthly goal.

    ``progress_percent`` is capped at 100; overachievement is reported via
    ``goal_met`` instead.
    """

    goal: StoreMeta
    current_revenue: float
    progress_percent: float
    goal_met: bool
    remaining: float


@dataclass(frozen=True)
class StoreEfficiency:
    """Per-store efficiency indicators over a report period."""

    store: Store
    closings_count: int
    total_revenue: float
    total_expense: float
    net_result: float
    revenue_per_closing: float
    cost_per_revenue: float
    profit_margin: float


@dataclass(frozen=True)
class PaymentMethodBreakdown:
    """Gross movement amounts grouped by payment method."""

    payment_method_id: str
    label: str
    movements_count: int
    total_amount: float


# ---------------------------------------------------------------------------
# Catalog helpers
# ---------------------------------------------------------------------------


def validate_stores(stores: tuple[Store, ...]) -> None:
    """Check catalog-level store invariants.

    Raises:
        ValueError: if two stores share an id or more than one store is
            flagged as default.
    """
    seen: set[str] = set()
    for store in stores:
        if store.id in seen:
            raise ValueError(f"Duplicate store id in catalog: {store.id!r}")
        seen.add(store.id)

    defaults = [s.id for s in stores if s.is_default]
    if len(defaults) > 1:
        raise ValueError(
            "At most one store may be flagged as default, found: "
            + ", ".join(defaults)
        )


def find_default_store(stores: tuple[Store, ...]) -> Optional[Store]:
    """Return the default store, or the only store of a single-store catalog."""
    for store in stores:
        if store.is_default:
            return store
    if len(stores) == 1:
        return stores[0]
    return None
