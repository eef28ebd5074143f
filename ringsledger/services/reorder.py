"""
Ordered list repositioning.

Keeps a strict order over records through an integer `position` field.
Positions are unique within one list but need not be contiguous; they
are only ever swapped pairwise or appended, never renumbered in bulk.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from ringsledger.models.campaign import ReorderDirection
from ringsledger.models.failure import NotFoundError


class Positioned(Protocol):
    id: int
    position: int


@dataclass(frozen=True, slots=True)
class PositionSwap:
    """
    The two writes that move one record a single step.

    Both must be applied together; applying only one leaves two
    records sharing a position.
    """

    target_id: int
    target_position: int
    neighbor_id: int
    neighbor_position: int


def plan_position_swap(
    ordered: Sequence[Positioned],
    item_id: int,
    direction: ReorderDirection,
) -> PositionSwap | None:
    """
    Plan a one-step move of `item_id` within `ordered`.

    Args:
        ordered: Records sorted ascending by position
        item_id: Record to move
        direction: UP moves toward the start, DOWN toward the end

    Returns:
        The swap to apply, or None when the record is already at the
        boundary in that direction (a no-op, not an error)

    Raises:
        NotFoundError: If item_id is not in the list
    """
    idx = next((i for i, record in enumerate(ordered) if record.id == item_id), None)
    if idx is None:
        raise NotFoundError("Scenario", item_id)

    swap_idx = idx - 1 if direction == ReorderDirection.UP else idx + 1
    if swap_idx < 0 or swap_idx >= len(ordered):
        return None

    target = ordered[idx]
    neighbor = ordered[swap_idx]
    return PositionSwap(
        target_id=target.id,
        target_position=neighbor.position,
        neighbor_id=neighbor.id,
        neighbor_position=target.position,
    )


def next_position(existing_positions: Iterable[int]) -> int:
    """Position for a record appended to the list: max + 1, or 0 if empty."""
    return max(existing_positions, default=-1) + 1
