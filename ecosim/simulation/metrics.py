"""
KPI Metrics collection for the Ecosystem Simulator.

MetricsCollector gathers per-tick Key Performance Indicators (KPIs) from the
world state and the engine's tick statistics. It produces a flat dictionary
per tick suitable for CSV export and charting.
"""

from __future__ import annotations

import numpy as np

from ecosim.core.world import World
from ecosim.simulation.engine import TickStats


class MetricsCollector:
    """
    Collects and computes KPIs per tick.

    Usage:
      1. After each tick, call `collect(world, tick_stats)`
      2. Resulting dict is appended to `history`
      3. Call `get_history()` to retrieve all collected rows

    Attributes:
        history: List of KPI dicts, one per collected tick.
    """

    def __init__(self):
        self.history: list[dict] = []

    def collect(self, world: World, stats: TickStats) -> dict:
        """
        Compute all KPIs for the current tick and append to history.

        Args:
            world: Current world state.
            stats: Counters from the tick just run.

        Returns:
            Dict of KPI_name -> value.
        """
        kpis: dict = {}
        alive = [p for p in world.plants if p.alive]

        # --- Population ---
        kpis["tick"] = stats.tick
        kpis["plant_count"] = len(alive)
        kpis["fern_count"] = stats.fern_count
        kpis["tree_count"] = stats.tree_count
        if alive:
            kpis["fern_pct"] = round(stats.fern_count / len(alive) * 100.0, 2)
            kpis["tree_pct"] = round(stats.tree_count / len(alive) * 100.0, 2)
        else:
            kpis["fern_pct"] = 0.0
            kpis["tree_pct"] = 0.0
        kpis["rock_count"] = len(world.rocks)
        kpis["plant_limit"] = world.plant_limit
        kpis["extinction_flag"] = len(alive) == 0

        # --- Births, deaths, fire ---
        kpis["births"] = stats.births
        kpis["deaths_age"] = stats.deaths_age
        kpis["deaths_fire"] = stats.deaths_fire
        kpis["deaths_drought"] = stats.deaths_drought
        kpis["deaths_total"] = stats.deaths_total
        kpis["plants_ignited"] = stats.plants_ignited
        kpis["burning_count"] = world.burning_count

        # --- Plant statistics ---
        if alive:
            kpis["avg_health"] = float(np.mean([p.health for p in alive]))
            kpis["avg_age"] = float(np.mean([p.age for p in alive]))
            kpis["avg_size"] = float(np.mean([p.size for p in alive]))
        else:
            kpis["avg_health"] = 0.0
            kpis["avg_age"] = 0.0
            kpis["avg_size"] = 0.0

        # --- Board conditions ---
        totals = world.board.condition_totals()
        cells = world.board.dimension ** 2
        kpis["avg_light"] = totals.light / cells
        kpis["avg_moisture"] = totals.moisture / cells

        self.history.append(kpis)
        return kpis

    def get_history(self) -> list[dict]:
        """Return all collected KPI rows."""
        return list(self.history)

    def latest(self) -> dict:
        """Most recent KPI row, or an empty dict."""
        return self.history[-1] if self.history else {}

    @staticmethod
    def kpi_names() -> list[str]:
        """Ordered list of every KPI column."""
        return [
            "tick",
            "plant_count", "fern_count", "tree_count", "fern_pct", "tree_pct",
            "rock_count", "plant_limit", "extinction_flag",
            "births", "deaths_age", "deaths_fire", "deaths_drought", "deaths_total",
            "plants_ignited", "burning_count",
            "avg_health", "avg_age", "avg_size",
            "avg_light", "avg_moisture",
        ]
