"""
Rock entity for the Ecosystem Simulator.

Rocks are inert: they never age, never die and never touch the section
they sit on. They take part in the evolution pass only so that every
entity is driven the same way, and they win over plants on the map.
"""

from __future__ import annotations

from dataclasses import dataclass

from ecosim.core.board import Board, BoardSection, Location


ROCK_GLYPH = "🪨"


@dataclass(slots=True)
class Rock:
    """An immovable rock occupying one board cell."""
    location: Location

    @classmethod
    def new_random(cls, board: Board, rng) -> Rock:
        """Rock at a uniformly random cell of `board`."""
        return cls(Location.new_random(board.size, rng))

    @property
    def alive(self) -> bool:
        """Rocks are never removed from the population."""
        return True

    @property
    def glyph(self) -> str:
        return ROCK_GLYPH

    def evolve(self, section: BoardSection, rng=None) -> None:
        """No-op; rocks do not change over time."""
