"""
Map projection for the Ecosystem Simulator.

A Map is a glyph picture of the board. It starts as one background glyph
per board cell; entity glyphs are plotted on top, and `render(scale)`
reduces the full-resolution picture by `scale` on both axes for display.

Block reduction rules (per `scale` x `scale` block):
  - every cell is background      -> background
  - any cell holds a rock         -> rock
  - otherwise                     -> first non-background glyph in block order

Reduction runs in two passes. The first collapses each board column along
ascending y; the second collapses the results along descending x. With no
rock present, a block shows the glyph from its highest-x column that holds
anything, and within that column the one with the lowest y.

The rendered grid is oriented like a Cartesian plot: row 0 of the output
is the top of the board (highest y) and board cell (0, 0) ends up in the
bottom-left corner.
"""

from __future__ import annotations

from typing import Iterable, Optional

import numpy as np
from numpy.typing import NDArray

from ecosim.core.board import Board, Location
from ecosim.core.rock import ROCK_GLYPH


BACKGROUND_GLYPH = "⬛"


class Map:
    """
    Display-resolution glyph grid built from a board.

    Attributes:
        board: The board this map depicts (read only).
        matrix: Full-resolution glyphs, indexed [x, y].
        matrix_scaled: Last rendered grid, indexed [row, column] with row 0
                       at the top. Equals `matrix` in display orientation
                       until `render` is called.
    """

    def __init__(self, board: Board):
        self.board = board
        n = board.dimension
        self.matrix: NDArray[np.object_] = np.full((n, n), BACKGROUND_GLYPH, dtype=object)
        self.matrix_scaled: NDArray[np.object_] = np.flipud(self.matrix.T).copy()

    # ------------------------------------------------------------------
    # Plotting
    # ------------------------------------------------------------------

    def plot_entity(self, location: Location, glyph: str) -> None:
        """Place a glyph on one location, replacing whatever was there."""
        self.matrix[location.x, location.y] = glyph

    def plot_entities(self, locations: Iterable[Location], glyph: str) -> None:
        """Place the same glyph on every given location."""
        for location in locations:
            self.matrix[location.x, location.y] = glyph

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, scale: int) -> NDArray[np.object_]:
        """
        Reduce the map by `scale` on both axes.

        Args:
            scale: Block edge length. Must evenly divide the board dimension.

        Returns:
            The rendered glyph grid (also stored in `matrix_scaled`).

        Raises:
            ValueError: If scale < 1 or does not divide the board dimension.
        """
        dimension = self.board.dimension
        if scale < 1 or dimension % scale != 0:
            raise ValueError(
                f"map size and scale factor are not evenly divisible - "
                f"dimension: {dimension}, scale: {scale}"
            )

        # Reduce along y (each row of the [x, y] matrix is one column of the board)
        reduced = self._reduce_rows(self.matrix, scale)
        # Mirror each row and turn clockwise: rows become descending y,
        # columns descending x, so the second pass walks x from high to low
        reduced = self._reduce_rows(np.rot90(np.fliplr(reduced), k=-1), scale)
        # Mirror back so x grows to the right; row 0 is already the top
        self.matrix_scaled = np.fliplr(reduced).copy()
        return self.matrix_scaled

    @staticmethod
    def _reduce_rows(grid: NDArray[np.object_], scale: int) -> NDArray[np.object_]:
        rows, cols = grid.shape
        blocks = grid.reshape(rows, cols // scale, scale)
        reduced = np.empty((rows, cols // scale), dtype=object)
        for r in range(rows):
            for c in range(cols // scale):
                reduced[r, c] = _reduce_block(blocks[r, c])
        return reduced

    # ------------------------------------------------------------------
    # Text output
    # ------------------------------------------------------------------

    def rows(self) -> list[list[str]]:
        """Rendered grid as nested lists, top row first."""
        return self.matrix_scaled.tolist()

    def to_text(self, debug: bool = False) -> str:
        """
        Format the rendered grid for printing.

        Args:
            debug: Prefix each row with its map y index and append a row
                   of x indices.

        Returns:
            Multi-line string; the caller decides where to write it.
        """
        grid = self.matrix_scaled
        height, width = grid.shape
        lines = []
        for i, row in enumerate(grid):
            if debug:
                label = height - 1 - i
                lines.append(f"y {label:>2} " + "".join(f"{c:<2}" for c in row))
            else:
                lines.append(" ".join(row))
        if debug:
            lines.append("   x " + " ".join(f"{i:>2}" for i in range(width)))
        return "\n".join(lines)

    def __repr__(self) -> str:
        h, w = self.matrix_scaled.shape
        return f"Map(board={self.board.dimension}x{self.board.dimension}, rendered={w}x{h})"


def _reduce_block(block: Iterable[str]) -> str:
    """Collapse one block of glyphs into a single glyph."""
    first: Optional[str] = None
    for glyph in block:
        if glyph == ROCK_GLYPH:
            return ROCK_GLYPH
        if first is None and glyph != BACKGROUND_GLYPH:
            first = glyph
    return first if first is not None else BACKGROUND_GLYPH
