"""
Board (environment grid) for the Ecosystem Simulator.

The board is a square matrix of sections. Each section holds the
environmental conditions of one cell (light, moisture, oxygen) and the
fixed location of that cell. Effects mutate the conditions, either on a
single section or uniformly across the whole board.

Coordinates are bounded: a Location never wraps and never leaves
[0, max] on either axis.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator

from ecosim.utils.spatial import (
    cells_in_range,
    chebyshev_distance,
    in_bounds,
    moore_neighbors,
)


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Location:
    """
    A coordinate on a bounded square board.

    Attributes:
        max: Largest valid coordinate on either axis (board size).
        x: Column, 0 <= x <= max.
        y: Row, 0 <= y <= max. Row 0 is the bottom of the rendered map.
    """
    max: int
    x: int = 0
    y: int = 0

    def __post_init__(self) -> None:
        if not in_bounds(self.x, self.y, self.max):
            raise ValueError(
                f"Location ({self.x}, {self.y}) outside board bounds [0, {self.max}]"
            )

    @classmethod
    def new(cls, max_index: int) -> Location:
        """Location at the origin of a board with the given max index."""
        return cls(max=max_index)

    @classmethod
    def new_random(cls, max_index: int, rng) -> Location:
        """
        Location drawn uniformly from the whole board.

        Args:
            max_index: Largest valid coordinate.
            rng: Random source with an `integers(low, high)` method
                 (e.g. numpy.random.Generator).
        """
        return cls.new(max_index).randomized(rng)

    @property
    def position(self) -> tuple[int, int]:
        """Grid position as (x, y) tuple."""
        return (self.x, self.y)

    def randomized(self, rng) -> Location:
        """Copy of this location moved to a uniformly random cell."""
        return replace(
            self,
            x=int(rng.integers(0, self.max + 1)),
            y=int(rng.integers(0, self.max + 1)),
        )

    def moved_to(self, x: int, y: int) -> Location:
        """Copy of this location at (x, y) on the same board."""
        return replace(self, x=x, y=y)

    def nearby(self) -> list[Location]:
        """Moore neighbourhood of this location, clipped to the board."""
        return [
            Location(self.max, nx, ny)
            for nx, ny in moore_neighbors(self.x, self.y, self.max)
        ]

    def within_range(self, radius: int) -> list[Location]:
        """
        Every location within Chebyshev distance `radius`, clipped to the board.

        The location itself is excluded. `within_range(1)` holds the same
        cells as `nearby()`.
        """
        return [
            Location(self.max, nx, ny)
            for nx, ny in cells_in_range(self.x, self.y, radius, self.max)
        ]

    def distance_to(self, other: Location) -> int:
        """Chebyshev distance to another location."""
        return chebyshev_distance(self.x, self.y, other.x, other.y)

    def __repr__(self) -> str:
        return f"Location(({self.x},{self.y}), max={self.max})"


# ---------------------------------------------------------------------------
# Conditions & sections
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Conditions:
    """Environmental quantities of one cell. All values are >= 0."""
    light: int = 0
    moisture: int = 0
    oxygen: int = 0  # reserved, no rule reads it yet


@dataclass(slots=True)
class BoardSection:
    """One grid cell: its conditions and its (fixed) location."""
    location: Location
    conditions: Conditions = field(default_factory=Conditions)


class Board:
    """
    The square environment grid.

    `matrix[x][y]` is the section at column x, row y. The board holds
    `size + 1` cells per side; each section's location is fixed at
    construction and matches its matrix indices.

    Attributes:
        size: Largest valid coordinate (board max index).
        matrix: Nested list of BoardSection, indexed [x][y].
    """

    def __init__(self, size: int):
        """
        Build a zeroed board.

        Args:
            size: Largest valid coordinate. Must be >= 1 so that every
                  cell has at least one neighbour.

        Raises:
            ValueError: If size < 1.
        """
        if size < 1:
            raise ValueError(f"Board size must be >= 1, got {size}")
        self.size = size
        self.matrix: list[list[BoardSection]] = [
            [BoardSection(location=Location(size, x, y)) for y in range(size + 1)]
            for x in range(size + 1)
        ]

    @property
    def dimension(self) -> int:
        """Number of cells per side."""
        return self.size + 1

    def section(self, location: Location) -> BoardSection:
        """Section at a location."""
        return self.matrix[location.x][location.y]

    def section_at(self, x: int, y: int) -> BoardSection:
        """Section at raw coordinates."""
        return self.matrix[x][y]

    def sections(self) -> Iterator[BoardSection]:
        """Iterate over every section, column by column."""
        for column in self.matrix:
            yield from column

    def condition_totals(self) -> Conditions:
        """Sum of each condition over the whole board."""
        total = Conditions()
        for section in self.sections():
            total.light += section.conditions.light
            total.moisture += section.conditions.moisture
            total.oxygen += section.conditions.oxygen
        return total

    def __repr__(self) -> str:
        return f"Board(size={self.dimension}x{self.dimension})"


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

class Condition(Enum):
    """Environmental field an Effect acts on."""
    LIGHT = "light"
    MOISTURE = "moisture"
    OXYGEN = "oxygen"


@dataclass(frozen=True, slots=True)
class Effect:
    """
    A signed change to one environmental field.

    Two operators:
      - apply:  overwrite the field with `delta` (negative values become 0)
      - append: add `delta` to the field, saturating at 0

    Oxygen effects are accepted but leave every section untouched.

    Attributes:
        condition: Which field the effect targets.
        delta: Signed amount.
    """
    condition: Condition
    delta: int

    @classmethod
    def light(cls, delta: int) -> Effect:
        return cls(Condition.LIGHT, delta)

    @classmethod
    def moisture(cls, delta: int) -> Effect:
        return cls(Condition.MOISTURE, delta)

    @classmethod
    def oxygen(cls, delta: int) -> Effect:
        return cls(Condition.OXYGEN, delta)

    def apply_to_section(self, section: BoardSection) -> None:
        """Overwrite the targeted field of one section."""
        if self.condition is Condition.OXYGEN:
            return
        setattr(section.conditions, self.condition.value, max(0, self.delta))

    def append_to_section(self, section: BoardSection) -> None:
        """Add to the targeted field of one section, flooring at zero."""
        if self.condition is Condition.OXYGEN:
            return
        current = getattr(section.conditions, self.condition.value)
        setattr(section.conditions, self.condition.value, max(0, current + self.delta))

    def apply_global(self, board: Board) -> None:
        """Overwrite the targeted field on every section of the board."""
        for section in board.sections():
            self.apply_to_section(section)

    def append_global(self, board: Board) -> None:
        """Add to the targeted field on every section of the board."""
        for section in board.sections():
            self.append_to_section(section)
