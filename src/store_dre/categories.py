# Store DRE - Store-level financial consolidation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Category resolution for movement types.

Every aggregator in Store DRE needs to know whether a movement is a
revenue, an expense or an "other" cash flow. That information lives on the
MovementType catalog, and movements only carry a reference to it.

Responsibilities:
- Resolve a movement type reference to its semantic category.
- Build a reusable lookup index for repeated resolutions.
- Signal unknown references as configuration errors. Deciding what to do
  with the offending movement (exclude it and report it) is the caller's job.
"""

from collections.abc import Iterable, Mapping
from typing import Union

from .models import MovementType


class ConfigurationError(ValueError):
    """Base class for errors caused by incomplete catalog data."""


class UnknownMovementTypeError(ConfigurationError):
    """Raised when a movement references a MovementType that does not exist."""

    def __init__(self, movement_type_id: str):
        self.movement_type_id = movement_type_id
        super().__init__(
            f"Unknown movement type {movement_type_id!r}: "
            "check the movement type catalog."
        )


def build_category_index(movement_types: Iterable[MovementType]) -> dict[str, str]:
    """Return a mapping {movement_type_id -> category}.

    Raises:
        ValueError: if the same movement type id is defined twice with
            different categories.
    """
    index: dict[str, str] = {}
    for mt in movement_types:
        existing = index.get(mt.id)
        if existing is not None and existing != mt.category:
            raise ValueError(
                f"Movement type {mt.id!r} is defined with conflicting "
                f"categories: {existing!r} and {mt.category!r}."
            )
        index[mt.id] = mt.category
    return index


def resolve_category(
    movement_type_id: str,
    movement_types: Union[Iterable[MovementType], Mapping[str, str]],
) -> str:
    """Resolve a movement type reference to 'revenue', 'expense' or 'other'.

    Args:
        movement_type_id: Reference carried by a MovementItem.
        movement_types: Either the MovementType catalog or an index built by
            ``build_category_index``.

    Returns:
        The category of the referenced movement type.

    Raises:
        UnknownMovementTypeError: if the reference is not in the catalog.
    """
    if isinstance(movement_types, Mapping):
        index = movement_types
    else:
        index = build_category_index(movement_types)

    category = index.get(str(movement_type_id))
    if category is None:
        raise UnknownMovementTypeError(str(movement_type_id))
    return category
