"""Marker placement helpers (pure, no Qt)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar

POSITIONS: Tuple[str, ...] = (
    "top-left",
    "top",
    "top-right",
    "left",
    "center",
    "right",
    "bottom-left",
    "bottom",
    "bottom-right",
)
BOUNDARIES: Tuple[str, ...] = ("inner", "outer")
DEFAULT_POSITION = "center"
DEFAULT_BOUNDARY = "inner"

Offset = Tuple[float, float]
NodeT = TypeVar("NodeT")


@dataclass(frozen=True)
class TargetBox:
    left: float
    top: float
    width: int
    height: int


@dataclass(frozen=True)
class MarkerSize:
    width: int
    height: int


def normalise_position(position: Optional[str]) -> str:
    token = (position or "").strip().lower()
    if token in POSITIONS:
        return token
    return DEFAULT_POSITION


def normalise_boundary(boundary: Optional[str]) -> str:
    token = (boundary or "").strip().lower()
    return "inner" if token == "inner" else "outer"


def _truncate(value: float) -> int:
    # Fractional sizes truncate toward zero.
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def compute_position(
    target_box: TargetBox,
    marker_size: MarkerSize,
    position: Optional[str],
    boundary: Optional[str],
) -> Offset:
    """Return the (left, top) offset of a marker anchored on ``target_box``.

    Coordinates share the space of ``target_box`` (the marker's host widget).
    ``inner`` keeps the marker inside the box edge it is anchored to, ``outer``
    pushes it past that edge. ``center`` ignores the boundary and unknown
    positions fall back to ``center``.
    """

    position = normalise_position(position)
    boundary = normalise_boundary(boundary)
    inner = boundary == "inner"

    left = target_box.left
    top = target_box.top
    width = _truncate(target_box.width)
    height = _truncate(target_box.height)
    m_width = _truncate(marker_size.width)
    m_height = _truncate(marker_size.height)

    centre_x = left + (width - m_width) / 2
    centre_y = top + (height - m_height) / 2

    if position == "top-left":
        return (left, top) if inner else (left - m_width, top - m_height)
    if position == "top":
        return (centre_x, top) if inner else (centre_x, top - m_height)
    if position == "top-right":
        return (left + width - m_width, top) if inner else (left + width, top - m_height)
    if position == "left":
        return (left, centre_y) if inner else (left - m_width, centre_y)
    if position == "right":
        return (left + width - m_width, centre_y) if inner else (left + width, centre_y)
    if position == "bottom-left":
        return (left, top + height - m_height) if inner else (left - m_width, top + height)
    if position == "bottom":
        return (centre_x, top + height - m_height) if inner else (centre_x, top + height)
    if position == "bottom-right":
        if inner:
            return (left + width - m_width, top + height - m_height)
        return (left + width, top + height)
    return (centre_x, centre_y)


def has_fixed_context(
    node: Optional[NodeT],
    root: Optional[NodeT],
    *,
    parent_fn: Callable[[NodeT], Optional[NodeT]],
    is_fixed_fn: Callable[[NodeT], bool],
) -> bool:
    """Walk upwards from ``node`` looking for a fixed positioning context.

    The walk ends at the first node without a parent or at ``root``; neither
    of those is tested.
    """

    current = node
    while current is not None:
        if current is root:
            return False
        parent = parent_fn(current)
        if parent is None:
            return False
        if is_fixed_fn(current):
            return True
        current = parent
    return False
