"""
Spatial utilities for the Ecosystem Simulator.

Provides bounded (non-wrapping) grid math: bounds checks, neighbour
enumeration and Chebyshev-range queries.

All functions assume a square grid whose coordinates run from 0 to
`max_index` inclusive on both axes. Cells outside that range are clipped,
never wrapped.
"""

from __future__ import annotations


# Moore neighbourhood offsets, starting at the lower-left cell and walking
# clockwise: (-1,-1) (0,-1) (1,-1) (1,0) (1,1) (0,1) (-1,1) (-1,0)
MOORE_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1), (0, -1), (1, -1),
    (1, 0),
    (1, 1), (0, 1), (-1, 1),
    (-1, 0),
)


def in_bounds(x: int, y: int, max_index: int) -> bool:
    """True if (x, y) lies within [0, max_index] on both axes."""
    return 0 <= x <= max_index and 0 <= y <= max_index


def clamp_axis(value: int, max_index: int) -> int:
    """Clamp a single coordinate to [0, max_index]."""
    return max(0, min(max_index, value))


def moore_neighbors(x: int, y: int, max_index: int) -> list[tuple[int, int]]:
    """
    Enumerate the Moore (8-connected) neighbourhood of a cell.

    The cell itself is excluded and candidates falling off the grid are
    dropped, so the result holds 3 cells at a corner, 5 on an edge and 8
    in the interior.

    Args:
        x, y: Centre cell.
        max_index: Largest valid coordinate on either axis.

    Returns:
        List of (x, y) tuples in lower-left, clockwise order.
    """
    return [
        (x + dx, y + dy)
        for dx, dy in MOORE_OFFSETS
        if in_bounds(x + dx, y + dy, max_index)
    ]


def cells_in_range(
    x: int, y: int,
    radius: int,
    max_index: int,
) -> list[tuple[int, int]]:
    """
    Enumerate all cells within a Chebyshev radius (a square) of a cell.

    The square is clipped to the grid and the centre cell is excluded.

    Args:
        x, y: Centre cell.
        radius: Chebyshev radius (>= 0).
        max_index: Largest valid coordinate on either axis.

    Returns:
        List of (x, y) tuples, ordered by x then y.
    """
    x_lo, x_hi = clamp_axis(x - radius, max_index), clamp_axis(x + radius, max_index)
    y_lo, y_hi = clamp_axis(y - radius, max_index), clamp_axis(y + radius, max_index)
    cells = []
    for cx in range(x_lo, x_hi + 1):
        for cy in range(y_lo, y_hi + 1):
            if cx == x and cy == y:
                continue
            cells.append((cx, cy))
    return cells


def chebyshev_distance(x1: int, y1: int, x2: int, y2: int) -> int:
    """Chessboard distance between two cells."""
    return max(abs(x1 - x2), abs(y1 - y2))
