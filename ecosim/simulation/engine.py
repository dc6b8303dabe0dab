"""
Simulation Engine: main tick loop for the Ecosystem Simulator.

Drives the world one tick at a time in a fixed order:
climate effects, evolution pass (rocks, then plants), offspring harvest,
removal of the dead, outbreak fire seeding, extinction check.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Callable

from ecosim.core.config import SimConfig
from ecosim.core.map import Map
from ecosim.core.plant import PlantKind
from ecosim.core.world import World


# ---------------------------------------------------------------------------
# Tick statistics: lightweight counters for one tick
# ---------------------------------------------------------------------------

@dataclass
class TickStats:
    """Statistics collected during a single tick."""
    tick: int = 0
    births: int = 0
    deaths_age: int = 0
    deaths_fire: int = 0
    deaths_drought: int = 0
    plants_ignited: int = 0
    plant_count: int = 0
    fern_count: int = 0
    tree_count: int = 0
    burning: bool = False

    @property
    def deaths_total(self) -> int:
        return self.deaths_age + self.deaths_fire + self.deaths_drought


# ---------------------------------------------------------------------------
# Run result
# ---------------------------------------------------------------------------

@dataclass
class RunResult:
    """Result of a complete simulation run."""
    config: SimConfig
    seed: int
    total_ticks: int = 0
    final_plant_count: int = 0
    extinct: bool = False
    extinction_tick: Optional[int] = None
    tick_stats_history: list[TickStats] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Simulation Engine
# ---------------------------------------------------------------------------

class SimulationEngine:
    """
    Core simulation engine.

    Attributes:
        config: Simulation configuration.
        world: The simulation world.
        rng: Master random generator (seeded, shared with the world).
        tick_stats: Statistics for the most recent tick.
        extinction_tick: Tick at which the board was first seen empty, or None.
        on_tick: Optional callback invoked after each tick(tick_number, engine).
        on_message: Optional callback invoked for each lifecycle message(text, engine).
    """

    def __init__(self, config: SimConfig, seed: Optional[int] = None):
        """
        Create a simulation engine.

        Args:
            config: Simulation configuration.
            seed: Random seed override. None = use config.board.seed.
        """
        self.config = config

        if seed is not None:
            self.config.board.seed = seed

        self.world = World(self.config)
        self.rng = self.world.rng

        self.tick_stats = TickStats()
        self._history: list[TickStats] = []
        self.extinction_tick: Optional[int] = None

        # Callbacks
        self.on_tick: Optional[Callable[[int, "SimulationEngine"], None]] = None
        self.on_message: Optional[Callable[[str, "SimulationEngine"], None]] = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(
        self,
        ferns: Optional[int] = None,
        trees: Optional[int] = None,
        rocks: Optional[int] = None,
    ) -> None:
        """Seed the starting population. None counts use the config."""
        self.world.initialize_population(ferns=ferns, trees=trees, rocks=rocks)

    # ------------------------------------------------------------------
    # Core tick
    # ------------------------------------------------------------------

    def tick(self) -> TickStats:
        """
        Execute one simulation tick.

        Processing order:
          1. Reset light, add ambient light, set rainfall (whole board)
          2. Evolve rocks, then plants, each against its own section
          3. Harvest seedlings into the population
          4. Report lifecycle messages and drop dead plants
          5. Ignite plants if the board is overcrowded
          6. Increment tick counter, note extinction, fire callbacks

        Returns:
            TickStats for this tick.
        """
        world = self.world
        stats = TickStats()

        # --- 1. Climate ---
        world.apply_climate()

        # --- 2. Evolution pass ---
        died = world.evolve_entities()
        for plant in died:
            if plant.death_cause == "age":
                stats.deaths_age += 1
            elif plant.death_cause == "fire":
                stats.deaths_fire += 1
            elif plant.death_cause == "drought":
                stats.deaths_drought += 1

        # --- 3. Offspring ---
        stats.births = len(world.harvest_offspring())

        # --- 4. Messages & the dead ---
        for message in world.drain_messages():
            if self.on_message is not None:
                self.on_message(message, self)
        world.remove_dead()

        # --- 5. Fire outbreak ---
        stats.plants_ignited = world.ignite_outbreak()

        # --- 6. Bookkeeping ---
        world.tick_count += 1
        counts = world.kind_counts()
        stats.tick = world.tick_count
        stats.plant_count = len(world.plants)
        stats.fern_count = counts[PlantKind.FERN]
        stats.tree_count = counts[PlantKind.TREE]
        stats.burning = world.burning_count > 0
        if self.extinction_tick is None and world.is_extinct:
            self.extinction_tick = world.tick_count

        self.tick_stats = stats
        self._history.append(stats)

        if self.on_tick is not None:
            self.on_tick(world.tick_count, self)

        return stats

    # ------------------------------------------------------------------
    # Multi-tick run
    # ------------------------------------------------------------------

    def run(self, max_ticks: Optional[int] = None) -> RunResult:
        """
        Run the simulation until the tick limit or extinction.

        Extinction is noticed at the end of the tick in which the last plant
        dies and ends the run one tick later, so the final empty board is
        still shown once.

        Args:
            max_ticks: Maximum number of ticks. None = config.run.max_ticks;
                       0 = no limit.

        Returns:
            RunResult with summary statistics.
        """
        if max_ticks is None:
            max_ticks = self.config.run.max_ticks

        result = RunResult(config=self.config, seed=self.config.board.seed)

        ticks_run = 0
        while max_ticks == 0 or ticks_run < max_ticks:
            self.tick()
            ticks_run += 1
            if self.extinction_tick is not None and self.extinction_tick < self.world.tick_count:
                break

        result.total_ticks = ticks_run
        result.extinction_tick = self.extinction_tick
        result.final_plant_count = self.world.alive_count
        result.extinct = self.world.is_extinct
        result.tick_stats_history = list(self._history)
        return result

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, scale: Optional[int] = None) -> Map:
        """
        Build and render a map of the current world.

        Args:
            scale: Reduction factor. None = config.map_scale.

        Returns:
            The rendered Map.
        """
        world_map = self.world.build_map()
        world_map.render(self.config.map_scale if scale is None else scale)
        return world_map

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def history(self) -> list[TickStats]:
        return list(self._history)

    @property
    def is_extinct(self) -> bool:
        return self.world.is_extinct

    @property
    def alive_count(self) -> int:
        return self.world.alive_count

    @property
    def current_tick(self) -> int:
        return self.world.tick_count

    def __repr__(self) -> str:
        return (
            f"SimulationEngine(tick={self.current_tick}, "
            f"plants={self.alive_count}, "
            f"rocks={len(self.world.rocks)})"
        )
