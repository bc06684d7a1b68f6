# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Store DRE.

This module reads the reporting snapshot from CSV files and normalizes it
into the immutable records consumed by the engine.

Expected input files
--------------------
Column names are case-insensitive and trimmed. Optional columns may be
omitted entirely.

stores.csv
    id, name [, nickname, code, icon, is_default]

movement_types.csv
    id, name, category [, color, icon]
    ``category`` must be one of: revenue, expense, other.

payment_methods.csv
    id, name [, type, color, icon]

closings.csv
    id, store_id, closing_date, initial_balance, final_balance

movements.csv
    id, closing_id, amount, movement_type_id
    [, description, discount, payment_method_id]

goals.csv
    id, store_id, month, year, target_revenue

Closing totals are never read from the files: every closing is built
through ``totals.make_closing`` so its derived fields always match its
movements. Goals sharing the same (store, month, year) are merged, the
last row winning.

If a file does not match the expected structure, or if numeric/date
parsing fails, a clear ValueError is raised.
"""

import logging
import os
from typing import Optional, Union

import pandas as pd

from .config import SnapshotConfig
from .goals import upsert_goal
from .models import (
    MovementItem,
    MovementType,
    PaymentMethod,
    Snapshot,
    Store,
    StoreClosing,
    StoreMeta,
    validate_stores,
)
from .totals import make_closing

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

_TRUE_VALUES = {"1", "true", "yes", "y", "t"}


def _read_table(
    path: PathLike,
    required: set[str],
    numeric: tuple[str, ...] = (),
) -> pd.DataFrame:
    """
    Read a CSV file as strings, normalize column names and check structure.

    Parameters
    ----------
    path:
        CSV file to read.
    required:
        Column names that must be present (lowercase).
    numeric:
        Columns converted to float. Empty cells become 0.0; any other
        non-numeric value raises.

    Returns
    -------
    pandas.DataFrame
        Normalized DataFrame; text columns are stripped strings.

    Raises
    ------
    ValueError
        If a required column is missing or a numeric column is invalid.
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [str(c).lower().strip() for c in df.columns]

    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"Invalid structure in {path}: missing column(s) "
            + ", ".join(sorted(missing))
            + "."
        )

    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()

    for col in numeric:
        if col not in df.columns:
            continue
        raw = df[col].replace("", "0")
        converted = pd.to_numeric(raw, errors="coerce")
        if converted.isna().any():
            raise ValueError(f"Invalid numeric values in '{col}' column of {path}.")
        df[col] = converted.astype(float)

    return df


def _optional(row: pd.Series, column: str, default: str = "") -> str:
    value = row.get(column, default)
    return str(value) if value is not None else default


def read_stores(path: PathLike) -> tuple[Store, ...]:
    """Read the store catalog and check its invariants."""
    df = _read_table(path, required={"id", "name"})

    stores = tuple(
        Store(
            id=row["id"],
            name=row["name"],
            nickname=_optional(row, "nickname") or None,
            code=_optional(row, "code") or None,
            icon=_optional(row, "icon"),
            is_default=_optional(row, "is_default").lower() in _TRUE_VALUES,
        )
        for _, row in df.iterrows()
    )
    validate_stores(stores)
    return stores


def read_movement_types(path: PathLike) -> tuple[MovementType, ...]:
    """Read the movement type catalog.

    Category values are case-insensitive.
    """
    df = _read_table(path, required={"id", "name", "category"})
    return tuple(
        MovementType(
            id=row["id"],
            name=row["name"],
            category=row["category"].lower(),
            color=_optional(row, "color"),
            icon=_optional(row, "icon"),
        )
        for _, row in df.iterrows()
    )


def read_payment_methods(path: PathLike) -> tuple[PaymentMethod, ...]:
    """Read the payment method catalog."""
    df = _read_table(path, required={"id", "name"})
    return tuple(
        PaymentMethod(
            id=row["id"],
            name=row["name"],
            type=_optional(row, "type") or "other",
            color=_optional(row, "color"),
            icon=_optional(row, "icon"),
        )
        for _, row in df.iterrows()
    )


def read_movements(path: PathLike) -> dict[str, list[MovementItem]]:
    """Read movements and group them by closing id, preserving file order."""
    df = _read_table(
        path,
        required={"id", "closing_id", "amount", "movement_type_id"},
        numeric=("amount", "discount"),
    )

    if (df["amount"] < 0).any():
        raise ValueError(f"Negative values in 'amount' column of {path}.")
    if "discount" in df.columns and (df["discount"] < 0).any():
        raise ValueError(f"Negative values in 'discount' column of {path}.")

    by_closing: dict[str, list[MovementItem]] = {}
    for _, row in df.iterrows():
        item = MovementItem(
            id=row["id"],
            description=_optional(row, "description"),
            amount=float(row["amount"]),
            discount=float(row["discount"]) if "discount" in df.columns else 0.0,
            movement_type_id=row["movement_type_id"],
            payment_method_id=_optional(row, "payment_method_id"),
        )
        by_closing.setdefault(row["closing_id"], []).append(item)
    return by_closing


def read_closings(
    closings_path: PathLike,
    movement_types: tuple[MovementType, ...],
    movements_path: Optional[PathLike] = None,
) -> tuple[StoreClosing, ...]:
    """
    Read closings, attach their movements and compute their totals.

    Parameters
    ----------
    closings_path:
        CSV file with one row per closing.
    movement_types:
        Catalog used to resolve movement categories.
    movements_path:
        Optional CSV file with the movements of every closing.

    Returns
    -------
    tuple[StoreClosing, ...]
        Closings in file order, with derived totals consistent with their
        movements.

    Raises
    ------
    ValueError
        If the structure is invalid, a date cannot be parsed, or a movement
        references an unknown closing.
    """
    df = _read_table(
        closings_path,
        required={"id", "store_id", "closing_date", "initial_balance", "final_balance"},
        numeric=("initial_balance", "final_balance"),
    )

    # Strict date parsing
    try:
        dates = pd.to_datetime(df["closing_date"], errors="raise").dt.date
    except Exception as exc:  # noqa: BLE001
        raise ValueError(
            f"Invalid values in 'closing_date' column of {closings_path}."
        ) from exc

    movements = read_movements(movements_path) if movements_path is not None else {}

    orphans = set(movements) - set(df["id"])
    if orphans:
        raise ValueError(
            "Movements reference unknown closing id(s): "
            + ", ".join(sorted(orphans))
            + "."
        )

    closings: list[StoreClosing] = []
    for idx, row in df.iterrows():
        closings.append(
            make_closing(
                closing_id=row["id"],
                store_id=row["store_id"],
                closing_date=dates[idx],
                movements=movements.get(row["id"], []),
                movement_types=movement_types,
                initial_balance=row["initial_balance"],
                final_balance=row["final_balance"],
            )
        )
    return tuple(closings)


def read_goals(path: PathLike) -> tuple[StoreMeta, ...]:
    """Read goals, merging duplicates on (store_id, month, year)."""
    df = _read_table(
        path,
        required={"id", "store_id", "month", "year", "target_revenue"},
        numeric=("month", "year", "target_revenue"),
    )

    for col in ("month", "year"):
        if (df[col] % 1 != 0).any():
            raise ValueError(f"Non-integer values in '{col}' column of {path}.")

    goals: tuple[StoreMeta, ...] = ()
    for _, row in df.iterrows():
        goal = StoreMeta(
            id=row["id"],
            store_id=row["store_id"],
            month=int(row["month"]),
            year=int(row["year"]),
            target_revenue=float(row["target_revenue"]),
        )
        if goal.month < 1 or goal.month > 12:
            raise ValueError(f"Invalid month {goal.month!r} for goal {goal.id!r}.")
        goals = upsert_goal(goals, goal, validate=False)
    return goals


def load_snapshot(cfg: SnapshotConfig) -> Snapshot:
    """Load every snapshot file described by the configuration."""
    stores = read_stores(cfg.stores)
    movement_types = read_movement_types(cfg.movement_types)
    payment_methods = (
        read_payment_methods(cfg.payment_methods)
        if cfg.payment_methods is not None
        else ()
    )
    closings = read_closings(cfg.closings, movement_types, cfg.movements)
    goals = read_goals(cfg.goals) if cfg.goals is not None else ()

    unresolved = sum(len(c.configuration_errors) for c in closings)
    if unresolved:
        logger.warning(
            "Snapshot has %d movement(s) with an unknown movement type; "
            "they are excluded from every total",
            unresolved,
        )

    logger.info(
        "Snapshot loaded: %d stores, %d closings, %d goals",
        len(stores),
        len(closings),
        len(goals),
    )

    return Snapshot(
        stores=stores,
        movement_types=movement_types,
        payment_methods=payment_methods,
        closings=closings,
        goals=goals,
    )
