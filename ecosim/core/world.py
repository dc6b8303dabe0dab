"""
World (Simulation Environment) for the Ecosystem Simulator.

Owns the board and the entity population (plants and rocks) and provides
the steps a tick is made of: climate effects, the evolution pass,
offspring harvest, removal of the dead, and outbreak fire seeding.

Each entity is evolved against its own board section only, rocks before
plants. Seedlings wait in their parent's offspring buffer until the whole
pass is over, so nothing is evolved in the tick it was born.
"""

from __future__ import annotations

from collections import Counter
from typing import Optional, Union

import numpy as np

from ecosim.core.board import Board, Effect
from ecosim.core.config import SimConfig
from ecosim.core.map import Map
from ecosim.core.plant import Plant, PlantKind
from ecosim.core.rock import Rock, ROCK_GLYPH


Entity = Union[Plant, Rock]


class World:
    """
    The simulation world: a bounded board with plants and rocks.

    Attributes:
        config: Simulation configuration.
        board: Environment grid, mutated in place every tick.
        plants: Live plant population (dead plants linger until `remove_dead`).
        rocks: Rock population; rocks are never removed.
        tick_count: Number of completed ticks.
        rng: Random source shared by every entity.
    """

    def __init__(self, config: SimConfig, rng: Optional[np.random.Generator] = None):
        """
        Initialize the world from a configuration.

        Args:
            config: Simulation configuration.
            rng: Random source. None = seeded generator from config.board.seed.
        """
        self.config = config
        self.board = Board(config.board.size)
        self.rng = rng if rng is not None else np.random.default_rng(config.board.seed)

        self.tick_count: int = 0
        self.plants: list[Plant] = []
        self.rocks: list[Rock] = []

    # ------------------------------------------------------------------
    # Population initialization
    # ------------------------------------------------------------------

    def initialize_population(
        self,
        ferns: Optional[int] = None,
        trees: Optional[int] = None,
        rocks: Optional[int] = None,
    ) -> None:
        """
        Place the starting plants and rocks at random cells.

        Args:
            ferns, trees, rocks: Counts. None = use the config values.
        """
        pop = self.config.population
        if ferns is None:
            ferns = pop.ferns
        if trees is None:
            trees = pop.trees
        if rocks is None:
            rocks = pop.rock_count(self.board.dimension)

        for _ in range(ferns):
            self.add_plant(Plant.new(PlantKind.FERN, self.board, self.rng))
        for _ in range(trees):
            self.add_plant(Plant.new(PlantKind.TREE, self.board, self.rng))
        for _ in range(rocks):
            self.add_rock(Rock.new_random(self.board, self.rng))

    def add_plant(self, plant: Plant) -> None:
        self.plants.append(plant)

    def add_rock(self, rock: Rock) -> None:
        self.rocks.append(rock)

    # ------------------------------------------------------------------
    # Tick steps
    # ------------------------------------------------------------------

    def apply_climate(self) -> None:
        """
        Reset and reapply the ambient conditions on every cell.

        Light is zeroed and then topped up with the ambient level; rainfall
        overwrites whatever moisture was left from the previous tick.
        """
        climate = self.config.climate
        Effect.light(0).apply_global(self.board)
        Effect.light(climate.ambient_light).append_global(self.board)
        Effect.moisture(climate.rainfall).apply_global(self.board)

    def evolve_entities(self) -> list[Plant]:
        """
        Evolve every rock, then every plant, against its own board section.

        Returns:
            Plants that died during this pass.
        """
        for rock in self.rocks:
            rock.evolve(self.board.section(rock.location), self.rng)

        died = []
        for plant in self.plants:
            was_alive = plant.alive
            plant.evolve(self.board.section(plant.location), self.rng)
            if was_alive and not plant.alive:
                died.append(plant)
        return died

    def harvest_offspring(self) -> list[Plant]:
        """
        Move every buffered seedling into the population.

        Returns:
            The seedlings added.
        """
        born = []
        for plant in self.plants:
            born.extend(plant.take_offspring())
        self.plants.extend(born)
        return born

    def remove_dead(self) -> list[Plant]:
        """
        Drop dead plants from the population.

        Returns:
            The plants removed.
        """
        dead = [p for p in self.plants if not p.alive]
        self.plants = [p for p in self.plants if p.alive]
        return dead

    def drain_messages(self) -> list[str]:
        """Collect and clear pending lifecycle messages from every plant."""
        messages = []
        for plant in self.plants:
            messages.extend(plant.take_messages())
        return messages

    # ------------------------------------------------------------------
    # Fire
    # ------------------------------------------------------------------

    @property
    def plant_limit(self) -> int:
        """Plant count above which fires break out."""
        cells = self.board.dimension ** 2
        reserve = int(cells * self.config.population.plant_limit_reserve)
        return cells - len(self.rocks) - reserve

    @property
    def overcrowded(self) -> bool:
        return len(self.plants) > self.plant_limit

    def ignite_outbreak(self) -> int:
        """
        Set plants on fire when the board is overcrowded.

        Every plant rolls once; a roll below its flammability chance
        ignites it.

        Returns:
            Number of plants newly set on fire.
        """
        if not self.overcrowded:
            return 0
        ignited = 0
        for plant in self.plants:
            if self.rng.random() < plant.flammability_chance:
                if not plant.on_fire:
                    ignited += 1
                plant.ignite()
        return ignited

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def entities(self) -> list[Entity]:
        """Rocks followed by plants, in evolution order."""
        return [*self.rocks, *self.plants]

    @property
    def alive_count(self) -> int:
        """Number of living plants."""
        return sum(1 for p in self.plants if p.alive)

    @property
    def is_extinct(self) -> bool:
        """True if no plant is alive."""
        return self.alive_count == 0

    @property
    def burning_count(self) -> int:
        return sum(1 for p in self.plants if p.alive and p.on_fire)

    def kind_counts(self) -> dict[PlantKind, int]:
        """Living plants per kind (every kind present, zero if none)."""
        counts = Counter(p.kind for p in self.plants if p.alive)
        return {kind: counts.get(kind, 0) for kind in PlantKind}

    def build_map(self) -> Map:
        """
        Map of the current board with every entity plotted.

        Rocks are plotted after plants so they take precedence.
        """
        world_map = Map(self.board)
        for plant in self.plants:
            if plant.alive:
                world_map.plot_entity(plant.location, plant.glyph)
        world_map.plot_entities((r.location for r in self.rocks), ROCK_GLYPH)
        return world_map

    def __repr__(self) -> str:
        n = self.board.dimension
        return (
            f"World(size={n}x{n}, tick={self.tick_count}, "
            f"plants={self.alive_count}, rocks={len(self.rocks)}, "
            f"burning={self.burning_count})"
        )
