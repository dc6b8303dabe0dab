"""
Tests for the console runner in main.py.

Tests cover:
- Ctrl-C during an unlimited run still closes the metrics file and
  writes a summary marked as interrupted
- --set overrides reach the saved config
- Bad scales, overrides and configs fail before anything runs
- main() turns those errors into exit status 1
"""

import csv
import json
import sys
from pathlib import Path

import pytest

import main
from main import run_console


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def small_config_path(tmp_path) -> Path:
    """16 x 16 board, 2 x 2 map, no tick limit, no screen clearing."""
    path = tmp_path / "small.json"
    path.write_text(json.dumps({
        "board": {"size": 15, "seed": 3},
        "run": {"max_ticks": 0, "map_size": 8},
        "viz": {"clear_screen": False},
    }))
    return path


@pytest.fixture
def out_dir(tmp_path) -> Path:
    return tmp_path / "runs"


def only_run_dir(out_dir: Path) -> Path:
    runs = [d for d in out_dir.iterdir() if d.is_dir()]
    assert len(runs) == 1
    return runs[0]


# ---------------------------------------------------------------------------
# Interrupted runs
# ---------------------------------------------------------------------------

class TestInterrupt:
    def test_ctrl_c_writes_summary_and_closes_metrics(self, small_config_path, out_dir, monkeypatch):
        calls = []

        def sleep_then_interrupt(seconds):
            calls.append(seconds)
            if len(calls) == 3:
                raise KeyboardInterrupt

        monkeypatch.setattr(main.time, "sleep", sleep_then_interrupt)

        run_console(str(small_config_path), delay_ms=1, output_dir=str(out_dir))

        run_dir = only_run_dir(out_dir)
        summary = json.loads((run_dir / "summary.json").read_text())
        assert summary["interrupted"] is True
        assert summary["total_ticks"] == 3
        assert summary["seed"] == 3

        with open(run_dir / "metrics.csv", newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [row["tick"] for row in rows] == ["1", "2", "3"]

    def test_interrupt_message_printed(self, small_config_path, monkeypatch, capsys):
        def interrupt(seconds):
            raise KeyboardInterrupt

        monkeypatch.setattr(main.time, "sleep", interrupt)
        run_console(str(small_config_path), delay_ms=1)
        out = capsys.readouterr().out
        assert "Interrupted at tick 1." in out
        assert "[Result]" in out

    def test_finished_run_not_marked_interrupted(self, small_config_path, out_dir):
        run_console(str(small_config_path), max_ticks=2, output_dir=str(out_dir), quiet=True)
        summary = json.loads((only_run_dir(out_dir) / "summary.json").read_text())
        assert summary["interrupted"] is False
        assert summary["total_ticks"] == 2


# ---------------------------------------------------------------------------
# Config overrides
# ---------------------------------------------------------------------------

class TestOverrides:
    def test_overrides_saved_with_run(self, small_config_path, out_dir):
        run_console(
            str(small_config_path),
            max_ticks=1,
            output_dir=str(out_dir),
            quiet=True,
            overrides=["climate.rainfall=3", "population.rocks=0"],
        )
        saved = json.loads((only_run_dir(out_dir) / "config.json").read_text())
        assert saved["climate"]["rainfall"] == 3
        assert saved["population"]["rocks"] == 0

    def test_command_line_flags_win_over_overrides(self, small_config_path, out_dir):
        run_console(
            str(small_config_path),
            seed_override=9,
            max_ticks=1,
            output_dir=str(out_dir),
            quiet=True,
            overrides=["board.seed=1"],
        )
        saved = json.loads((only_run_dir(out_dir) / "config.json").read_text())
        assert saved["board"]["seed"] == 9

    def test_unknown_override_key(self, small_config_path, out_dir):
        with pytest.raises(ValueError, match="snowfall"):
            run_console(str(small_config_path), output_dir=str(out_dir), overrides=["climate.snowfall=1"])
        assert not out_dir.exists()

    def test_override_breaking_validation(self, small_config_path, out_dir):
        with pytest.raises(ValueError, match="not divisible"):
            run_console(str(small_config_path), output_dir=str(out_dir), overrides=["run.map_size=5"])
        assert not out_dir.exists()


# ---------------------------------------------------------------------------
# Up-front validation
# ---------------------------------------------------------------------------

class TestValidation:
    def test_scale_not_dividing_board(self, small_config_path, out_dir, monkeypatch):
        monkeypatch.setattr(main.time, "sleep", lambda seconds: pytest.fail("a tick ran"))
        with pytest.raises(ValueError, match="does not evenly divide"):
            run_console(str(small_config_path), scale=3, delay_ms=1, output_dir=str(out_dir))
        assert not out_dir.exists()

    def test_zero_scale(self, small_config_path):
        with pytest.raises(ValueError):
            run_console(str(small_config_path), scale=0)

    def test_valid_scale_override(self, small_config_path, out_dir):
        run_console(str(small_config_path), scale=4, max_ticks=1, output_dir=str(out_dir), quiet=True)
        assert (only_run_dir(out_dir) / "summary.json").exists()

    def test_main_exits_with_error(self, small_config_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["main.py", "--config", str(small_config_path), "--scale", "3"])
        with pytest.raises(SystemExit) as exc_info:
            main.main()
        assert exc_info.value.code == 1
        assert capsys.readouterr().out.startswith("Error:")
