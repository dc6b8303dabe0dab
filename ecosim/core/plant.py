"""
Plant entity for the Ecosystem Simulator.

Plants occupy one board cell, age once per tick, draw moisture from the
cell they stand on, grow, reproduce into nearby cells once mature, and
die of old age, fire, or drought. Every kind carries a fixed set of
traits; nothing about a plant kind is configurable at run time.

Lifecycle per tick (`evolve`):
  1. age += 1
  2. dead plants stop here
  3. age > age_max                         -> health = 0 (old age)
  4. on fire                               -> random fire damage
  5. moisture >= requirement, not burning  -> drink, grow, maybe propagate
     moisture <  requirement               -> cell dried out, 1 damage
  6. health dropped to 0 during this call  -> death message
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ecosim.core.board import Board, BoardSection, Effect, Location


FIRE_GLYPH = "🔥"

# Plants whose size ratio exceeds this are mature enough to reproduce.
MATURITY_RATIO = 0.8


@dataclass(frozen=True)
class Requirements:
    """Per-tick resource needs, expressed as effect thresholds."""
    light: Effect
    moisture: Effect


@dataclass(frozen=True)
class KindTraits:
    """Fixed parameters shared by every plant of one kind."""
    age_max: int
    health_max: int
    size_max: int
    offspring_chance: float
    offspring_range: int
    flammability_chance: float
    requirements: Requirements
    glyph: str


class PlantKind(Enum):
    """Plant species. Each member's value is its fixed trait set."""

    FERN = KindTraits(
        age_max=12,
        health_max=10,
        size_max=8,
        offspring_chance=0.2,
        offspring_range=1,
        flammability_chance=0.99996,
        requirements=Requirements(light=Effect.light(20), moisture=Effect.moisture(2)),
        glyph="🌿",
    )
    TREE = KindTraits(
        age_max=80,
        health_max=18,
        size_max=50,
        offspring_chance=0.2,
        offspring_range=3,
        flammability_chance=0.99999,
        requirements=Requirements(light=Effect.light(20), moisture=Effect.moisture(4)),
        glyph="🌲",
    )

    @property
    def traits(self) -> KindTraits:
        return self.value

    @property
    def glyph(self) -> str:
        return self.value.glyph

    @property
    def label(self) -> str:
        """Display name, e.g. 'Fern'."""
        return self.name.capitalize()


class Plant:
    """
    A plant on the simulation board.

    Attributes:
        kind: Species of this plant.
        location: Cell the plant occupies.
        age: Ticks lived so far.
        health: Current health; the plant is dead at 0.
        size: Current size.
        on_fire: Whether the plant is burning.
        messages: Lifecycle events waiting to be drained by the driver.
        offspring: Seedlings produced this tick, waiting to be harvested.
        death_cause: "age", "fire" or "drought" once dead, else None.
        age_max, health_max, size_max, offspring_chance, offspring_range,
        flammability_chance, requirements: Kind traits copied at creation.
    """

    __slots__ = (
        "kind", "location", "age", "age_max", "health", "health_max",
        "size", "size_max", "offspring_chance", "offspring_range",
        "flammability_chance", "requirements", "on_fire",
        "messages", "offspring", "death_cause",
    )

    def __init__(
        self,
        kind: PlantKind,
        location: Location,
        age: int = 0,
        health: int = 1,
        size: int = 1,
        on_fire: bool = False,
    ):
        """
        Create a plant of the given kind at a location.

        Args:
            kind: Plant species (determines all fixed traits).
            location: Cell to occupy.
            age: Starting age (0 for seedlings).
            health: Starting health (1 for seedlings).
            size: Starting size (1 for seedlings).
            on_fire: Whether the plant starts out burning.
        """
        traits = kind.traits
        self.kind = kind
        self.location = location
        self.age = age
        self.age_max = traits.age_max
        self.health = health
        self.health_max = traits.health_max
        self.size = size
        self.size_max = traits.size_max
        self.offspring_chance = traits.offspring_chance
        self.offspring_range = traits.offspring_range
        self.flammability_chance = traits.flammability_chance
        self.requirements = traits.requirements
        self.on_fire = on_fire
        self.messages: list[str] = []
        self.offspring: list[Plant] = []
        self.death_cause: Optional[str] = None

    @classmethod
    def new(cls, kind: PlantKind, board: Board, rng) -> Plant:
        """Seedling of `kind` at a uniformly random cell of `board`."""
        return cls(kind, Location.new_random(board.size, rng))

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def alive(self) -> bool:
        """True while health is above zero."""
        return self.health > 0

    @property
    def mature(self) -> bool:
        """True once size exceeds 80% of size_max."""
        return self.size / self.size_max > MATURITY_RATIO

    @property
    def glyph(self) -> str:
        """Map glyph: fire while burning, otherwise the kind's glyph."""
        return FIRE_GLYPH if self.on_fire else self.kind.glyph

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def evolve(self, section: BoardSection, rng) -> None:
        """
        Advance one tick against the section this plant stands on.

        Args:
            section: The plant's own board cell (moisture is consumed here).
            rng: Random source with `random()` and `integers(low, high)`.
        """
        was_alive = self.alive
        self._biology(section, rng)
        if was_alive and not self.alive:
            self.messages.append(f"The {self.kind.label} perishes")

    def _biology(self, section: BoardSection, rng) -> None:
        self.age += 1

        if not self.alive:
            return

        # Old age takes priority over everything else
        if self.age > self.age_max:
            self.health = 0
            self.death_cause = "age"
            return

        if self.on_fire:
            self.damage(int(self.health_max * rng.random() * 0.1))
            if not self.alive:
                self.death_cause = "fire"
                return

        # Respiration
        need = self.requirements.moisture.delta
        conditions = section.conditions
        if conditions.moisture >= need:
            if self.on_fire:
                return
            conditions.moisture -= need
            self.grow()
            if self.mature and rng.random() < self.offspring_chance:
                self.offspring.extend(self.propagate(1, rng))
        else:
            # Whatever moisture is left gets used up; the shortfall costs 1 health
            conditions.moisture = 0
            self.damage(1)
            if not self.alive:
                self.death_cause = "drought"

    def damage(self, amount: int) -> None:
        """Reduce health by `amount`, flooring at zero."""
        self.health = max(0, self.health - amount)

    def grow(self) -> None:
        """Increase health and size by one each, capped at their maxima."""
        if self.health < self.health_max:
            self.health += 1
        if self.size < self.size_max:
            self.size += 1

    def propagate(self, num: int, rng) -> list[Plant]:
        """
        Produce `num` seedlings at one randomly chosen nearby cell.

        The cell is drawn from the Moore neighbourhood when offspring_range
        is 1, otherwise from the whole Chebyshev square of that radius.
        The parent loses nothing by reproducing.

        Args:
            num: Number of seedlings to create.
            rng: Random source with an `integers(low, high)` method.

        Returns:
            List of new Plant seedlings, all at the same location.
        """
        if self.offspring_range == 1:
            candidates = self.location.nearby()
        else:
            candidates = self.location.within_range(self.offspring_range)
        location = candidates[int(rng.integers(0, len(candidates)))]
        return [Plant(self.kind, location) for _ in range(num)]

    def ignite(self) -> None:
        """Set this plant on fire."""
        self.on_fire = True

    # ------------------------------------------------------------------
    # Buffers drained by the driver
    # ------------------------------------------------------------------

    def take_messages(self) -> list[str]:
        """Return and clear pending lifecycle messages."""
        messages = self.messages
        self.messages = []
        return messages

    def take_offspring(self) -> list[Plant]:
        """Return and clear buffered seedlings."""
        offspring = self.offspring
        self.offspring = []
        return offspring

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------

    def summary(self) -> str:
        return (
            f"Plant {{ kind: {self.kind.label} age: {self.age}/{self.age_max}, "
            f"health: {self.health}/{self.health_max}, size: {self.size}/{self.size_max} "
            f"location: ({self.location.x}, {self.location.y}) }}"
        )

    def to_dict(self) -> dict:
        """Serialize plant state for metrics/UI tables."""
        return {
            "kind": self.kind.label,
            "x": self.location.x,
            "y": self.location.y,
            "age": self.age,
            "health": self.health,
            "size": self.size,
            "on_fire": self.on_fire,
            "alive": self.alive,
            "death_cause": self.death_cause,
        }

    def __repr__(self) -> str:
        status = "alive" if self.alive else f"dead({self.death_cause})"
        if self.on_fire and self.alive:
            status = "burning"
        return (
            f"Plant(kind={self.kind.label}, pos=({self.location.x},{self.location.y}), "
            f"age={self.age}/{self.age_max}, health={self.health}/{self.health_max}, "
            f"size={self.size}/{self.size_max}, status={status})"
        )
