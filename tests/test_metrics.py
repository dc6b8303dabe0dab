"""
Tests for KPI metrics and run logging.

Tests cover:
- MetricsCollector: KPI names, population shares, averages, history
- CSVLogger: header, rows, sampling interval, reopen on close
- RunManager: directory layout, config, metrics, summary
- Integration: engine run -> metrics -> CSV
"""

import json
from pathlib import Path

import pytest

from ecosim.core.board import Location
from ecosim.core.config import SimConfig
from ecosim.core.plant import Plant, PlantKind
from ecosim.core.rock import Rock
from ecosim.core.world import World
from ecosim.logging.csv_logger import CSVLogger
from ecosim.logging.run_manager import RunManager
from ecosim.simulation.engine import SimulationEngine, TickStats
from ecosim.simulation.metrics import MetricsCollector


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> SimConfig:
    cfg = SimConfig()
    cfg.board.size = 15
    cfg.board.seed = 42
    cfg.population.ferns = 4
    cfg.population.trees = 2
    cfg.run.map_size = 8
    return cfg


@pytest.fixture
def world(config) -> World:
    return World(config)


@pytest.fixture
def tmp_dir(tmp_path) -> Path:
    return tmp_path


def add_plant(world: World, kind: PlantKind, x: int, y: int, **kwargs) -> Plant:
    plant = Plant(kind, Location(world.board.size, x, y), **kwargs)
    world.add_plant(plant)
    return plant


# ===========================================================================
# MetricsCollector Tests
# ===========================================================================

class TestMetricsCollector:
    def test_all_kpi_names_present(self, world):
        kpis = MetricsCollector().collect(world, TickStats())
        assert list(kpis) == MetricsCollector.kpi_names()

    def test_population_shares(self, world):
        add_plant(world, PlantKind.FERN, 1, 1, health=2)
        add_plant(world, PlantKind.FERN, 2, 2, health=4)
        add_plant(world, PlantKind.FERN, 3, 3, health=6)
        add_plant(world, PlantKind.TREE, 4, 4, health=8)
        stats = TickStats(tick=3, fern_count=3, tree_count=1)
        kpis = MetricsCollector().collect(world, stats)
        assert kpis["tick"] == 3
        assert kpis["plant_count"] == 4
        assert kpis["fern_pct"] == 75.0
        assert kpis["tree_pct"] == 25.0
        assert kpis["avg_health"] == pytest.approx(5.0)
        assert kpis["extinction_flag"] is False

    def test_empty_world(self, world):
        kpis = MetricsCollector().collect(world, TickStats())
        assert kpis["plant_count"] == 0
        assert kpis["fern_pct"] == 0.0
        assert kpis["avg_size"] == 0.0
        assert kpis["extinction_flag"] is True

    def test_dead_plants_excluded(self, world):
        add_plant(world, PlantKind.TREE, 1, 1, health=0)
        add_plant(world, PlantKind.TREE, 2, 1, health=3, size=5)
        kpis = MetricsCollector().collect(world, TickStats(tree_count=1))
        assert kpis["plant_count"] == 1
        assert kpis["avg_size"] == pytest.approx(5.0)

    def test_death_counts(self, world):
        stats = TickStats(deaths_age=2, deaths_fire=1, deaths_drought=4, births=3)
        kpis = MetricsCollector().collect(world, stats)
        assert kpis["deaths_total"] == 7
        assert kpis["births"] == 3

    def test_rocks_and_limit(self, world):
        world.add_rock(Rock(Location(15, 0, 0)))
        kpis = MetricsCollector().collect(world, TickStats())
        assert kpis["rock_count"] == 1
        assert kpis["plant_limit"] == world.plant_limit

    def test_board_averages(self, world):
        world.apply_climate()
        kpis = MetricsCollector().collect(world, TickStats())
        assert kpis["avg_light"] == pytest.approx(70.0)
        assert kpis["avg_moisture"] == pytest.approx(6.0)

    def test_burning_count(self, world):
        add_plant(world, PlantKind.TREE, 5, 5, health=3).ignite()
        assert MetricsCollector().collect(world, TickStats())["burning_count"] == 1

    def test_history_appended(self, world):
        collector = MetricsCollector()
        for tick in range(1, 4):
            collector.collect(world, TickStats(tick=tick))
        assert [row["tick"] for row in collector.get_history()] == [1, 2, 3]
        assert collector.latest()["tick"] == 3

    def test_latest_empty(self):
        assert MetricsCollector().latest() == {}


# ===========================================================================
# CSVLogger Tests
# ===========================================================================

class TestCSVLogger:
    def test_log_row_creates_file(self, tmp_dir):
        path = tmp_dir / "metrics.csv"
        with CSVLogger(path, columns=["tick", "plant_count"]) as log:
            log.log_row({"tick": 1, "plant_count": 5})
        assert path.exists()

    def test_header_written(self, tmp_dir):
        path = tmp_dir / "metrics.csv"
        with CSVLogger(path, columns=["tick", "plant_count"]) as log:
            log.log_row({"tick": 1, "plant_count": 5})
        assert path.read_text().splitlines()[0] == "tick,plant_count"

    def test_multiple_rows(self, tmp_dir):
        log = CSVLogger(tmp_dir / "m.csv", columns=["tick", "plant_count"])
        for tick in range(1, 4):
            log.log_row({"tick": tick, "plant_count": tick * 2})
        rows = log.read_back()
        log.close()
        assert [r["plant_count"] for r in rows] == ["2", "4", "6"]
        assert log.rows_written == 3

    def test_sampling_interval(self, tmp_dir):
        log = CSVLogger(tmp_dir / "m.csv", columns=["tick"], every=5)
        written = [log.log_row({"tick": t}) for t in range(1, 11)]
        log.close()
        assert written.count(True) == 2
        assert [r["tick"] for r in log.read_back()] == ["5", "10"]

    def test_rows_without_tick_always_written(self, tmp_dir):
        log = CSVLogger(tmp_dir / "m.csv", columns=["note"], every=10)
        assert log.log_row({"note": "final"}) is True
        log.close()

    def test_invalid_interval(self, tmp_dir):
        with pytest.raises(ValueError):
            CSVLogger(tmp_dir / "m.csv", every=0)

    def test_extra_keys_ignored(self, tmp_dir):
        with CSVLogger(tmp_dir / "m.csv", columns=["tick"]) as log:
            log.log_row({"tick": 1, "unexpected": 99})
        assert log.read_back() == [{"tick": "1"}]

    def test_read_back_missing_file(self, tmp_dir):
        assert CSVLogger(tmp_dir / "never.csv").read_back() == []

    def test_default_columns(self, tmp_dir):
        assert CSVLogger(tmp_dir / "m.csv").columns == MetricsCollector.kpi_names()


# ===========================================================================
# RunManager Tests
# ===========================================================================

class TestRunManager:
    def test_creates_directory(self, config, tmp_dir):
        rm = RunManager(config, base_dir=tmp_dir, run_name="test_run")
        assert rm.run_dir.exists()
        assert rm.config_path.exists()

    def test_config_saved(self, config, tmp_dir):
        rm = RunManager(config, base_dir=tmp_dir, run_name="test_run")
        with open(rm.config_path) as f:
            saved = json.load(f)
        assert saved["board"]["size"] == 15

    def test_log_tick(self, config, tmp_dir):
        rm = RunManager(config, base_dir=tmp_dir, run_name="test_run")
        rm.log_tick({"tick": 1, "plant_count": 6})
        rm.log_tick({"tick": 2, "plant_count": 7})
        rm.finalize()
        assert len(rm.csv_logger.read_back()) == 2

    def test_log_every(self, config, tmp_dir):
        rm = RunManager(config, base_dir=tmp_dir, run_name="test_run", log_every=2)
        for tick in range(1, 7):
            rm.log_tick({"tick": tick})
        rm.finalize()
        assert len(rm.csv_logger.read_back()) == 3

    def test_finalize_with_summary(self, config, tmp_dir):
        rm = RunManager(config, base_dir=tmp_dir, run_name="test_run")
        rm.finalize(summary={"total_ticks": 5, "extinct": False})
        with open(rm.summary_path) as f:
            data = json.load(f)
        assert data["total_ticks"] == 5

    def test_finalize_without_summary(self, config, tmp_dir):
        rm = RunManager(config, base_dir=tmp_dir, run_name="test_run")
        rm.finalize()
        assert not rm.summary_path.exists()

    def test_default_base_dir_from_config(self, config, tmp_dir):
        config.viz.output_dir = str(tmp_dir / "out")
        rm = RunManager(config, run_name="r")
        assert rm.run_dir == tmp_dir / "out" / "r"

    def test_auto_timestamp_name(self, config, tmp_dir):
        rm = RunManager(config, base_dir=tmp_dir)
        assert rm.run_dir.exists()
        assert len(rm.run_dir.name) > 8

    def test_repr(self, config, tmp_dir):
        assert "RunManager" in repr(RunManager(config, base_dir=tmp_dir, run_name="x"))


# ===========================================================================
# Integration
# ===========================================================================

class TestIntegration:
    def test_full_pipeline(self, config, tmp_dir):
        engine = SimulationEngine(config)
        engine.initialize()
        metrics = MetricsCollector()
        rm = RunManager(config, base_dir=tmp_dir, run_name="pipeline")
        engine.on_tick = lambda tick, eng: rm.log_tick(metrics.collect(eng.world, eng.tick_stats))

        result = engine.run(max_ticks=20)
        rm.finalize({"total_ticks": result.total_ticks})

        rows = rm.csv_logger.read_back()
        assert len(rows) == result.total_ticks
        assert rows[0]["tick"] == "1"
        assert set(rows[0]) == set(MetricsCollector.kpi_names())
        assert rm.summary_path.exists()
