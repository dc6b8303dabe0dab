"""
Configuration system for the Ecosystem Simulator.

Provides a hierarchical dataclass-based config with JSON serialization,
validation, and sensible defaults for every run parameter.

Only the run itself is configurable (board size, starting population,
climate, pacing, display). Plant and rock traits are fixed per kind and
live with the entity code, not here.
"""

from __future__ import annotations

import json
import warnings
from copy import deepcopy
from dataclasses import asdict, dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Sub-config dataclasses (grouped by domain)
# ---------------------------------------------------------------------------

@dataclass
class BoardConfig:
    """Grid settings."""
    size: int = 255     # largest coordinate; the board is (size + 1) cells per side
    seed: int = 42

    @property
    def dimension(self) -> int:
        return self.size + 1

    def validate(self) -> list[str]:
        errors = []
        if self.size < 1:
            errors.append(f"board.size must be >= 1, got {self.size}")
        if self.size > 4095:
            errors.append(f"board.size must be <= 4095, got {self.size}")
        return errors


@dataclass
class PopulationConfig:
    """Initial population settings."""
    ferns: int = 8
    trees: int = 8
    rocks: Optional[int] = None         # None = one rock per 8 cells of board width
    plant_limit_reserve: float = 0.1    # share of the board kept free before fires break out

    def rock_count(self, dimension: int) -> int:
        """Number of rocks to place on a board of the given dimension."""
        return dimension // 8 if self.rocks is None else self.rocks

    def validate(self) -> list[str]:
        errors = []
        if self.ferns < 0:
            errors.append(f"population.ferns must be >= 0, got {self.ferns}")
        if self.trees < 0:
            errors.append(f"population.trees must be >= 0, got {self.trees}")
        if self.ferns + self.trees < 1:
            errors.append("population: need at least one fern or tree")
        if self.rocks is not None and self.rocks < 0:
            errors.append(f"population.rocks must be >= 0 or null, got {self.rocks}")
        if not (0.0 <= self.plant_limit_reserve < 1.0):
            errors.append(
                f"population.plant_limit_reserve must be in [0, 1), got {self.plant_limit_reserve}"
            )
        return errors


@dataclass
class ClimateConfig:
    """Ambient conditions applied to every cell each tick."""
    ambient_light: int = 70
    rainfall: int = 6

    def validate(self) -> list[str]:
        errors = []
        if self.ambient_light < 0:
            errors.append(f"climate.ambient_light must be >= 0, got {self.ambient_light}")
        if self.rainfall < 0:
            errors.append(f"climate.rainfall must be >= 0, got {self.rainfall}")
        return errors


@dataclass
class RunConfig:
    """Tick loop and pacing settings."""
    max_ticks: int = 10_000     # 0 = run until extinction
    map_size: int = 32          # rendered map is map_size x map_size glyphs
    tick_delay_ms: int = 0
    burn_delay_ms: int = 100    # delay used instead while anything is burning

    def validate(self) -> list[str]:
        errors = []
        if self.max_ticks < 0:
            errors.append(f"run.max_ticks must be >= 0, got {self.max_ticks}")
        if self.map_size < 1:
            errors.append(f"run.map_size must be >= 1, got {self.map_size}")
        if self.tick_delay_ms < 0:
            errors.append(f"run.tick_delay_ms must be >= 0, got {self.tick_delay_ms}")
        if self.burn_delay_ms < 0:
            errors.append(f"run.burn_delay_ms must be >= 0, got {self.burn_delay_ms}")
        return errors


@dataclass
class VizConfig:
    """Console output settings."""
    clear_screen: bool = True
    debug_axes: bool = True
    output_dir: str = "runs"

    def validate(self) -> list[str]:
        errors = []
        if not self.output_dir:
            errors.append("viz.output_dir must not be empty")
        return errors


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass
class SimConfig:
    """
    Top-level simulation configuration.

    Nested dataclasses group related settings.
    Load from JSON with `load_config()`, validate with `validate()`.
    """
    board: BoardConfig = field(default_factory=BoardConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)
    climate: ClimateConfig = field(default_factory=ClimateConfig)
    run: RunConfig = field(default_factory=RunConfig)
    viz: VizConfig = field(default_factory=VizConfig)

    @property
    def map_scale(self) -> int:
        """Board cells per rendered glyph along each axis (exact once validated)."""
        return max(1, self.board.dimension // self.run.map_size)

    def validate(self) -> list[str]:
        """Validate all config sections. Returns list of error messages (empty = valid)."""
        errors = []
        for f in fields(self):
            sub = getattr(self, f.name)
            if hasattr(sub, "validate"):
                errors.extend(sub.validate())

        # Cross-section checks
        dimension = self.board.dimension
        if self.run.map_size > dimension:
            errors.append(
                f"run.map_size ({self.run.map_size}) must be <= board dimension ({dimension})"
            )
        elif self.run.map_size >= 1 and dimension % self.run.map_size != 0:
            errors.append(
                f"board dimension ({dimension}) is not divisible by run.map_size ({self.run.map_size})"
            )
        rocks = self.population.rock_count(dimension)
        if rocks > dimension * dimension:
            errors.append(f"population.rocks ({rocks}) exceeds board cell count")
        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to nested dict for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimConfig:
        """Create SimConfig from nested dict, merging with defaults."""
        config = cls()
        _merge_into_dataclass(config, data)
        return config

    def copy(self) -> SimConfig:
        """Deep copy of this config."""
        return deepcopy(self)


# ---------------------------------------------------------------------------
# Reading, writing and overriding
# ---------------------------------------------------------------------------

def _merge_into_dataclass(target: Any, source: dict[str, Any]) -> None:
    """Copy values from `source` onto `target`, descending into nested sections."""
    if not isinstance(source, dict):
        return

    names = {f.name for f in fields(target)}
    for name, value in source.items():
        if name not in names:
            warnings.warn(
                f"Unknown config key '{name}' in {type(target).__name__}; skipping.",
                UserWarning,
                stacklevel=3,
            )
            continue
        section = getattr(target, name)
        if is_dataclass(section) and isinstance(value, dict):
            _merge_into_dataclass(section, value)
        else:
            setattr(target, name, value)


def load_config(path: str | Path) -> SimConfig:
    """
    Read a JSON config file on top of the defaults.

    Sections or keys left out of the file keep their default values.

    Raises:
        FileNotFoundError: No file at `path`.
        json.JSONDecodeError: The file is not valid JSON.
        ValueError: The merged config fails validation.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    config = SimConfig.from_dict(json.loads(path.read_text(encoding="utf-8")))

    problems = config.validate()
    if problems:
        raise ValueError(
            f"Invalid configuration in {path}:\n" + "\n".join(f"  - {p}" for p in problems)
        )
    return config


def save_config(config: SimConfig, path: str | Path) -> None:
    """Write `config` as indented JSON, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(config.to_dict(), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )


def get_default_config() -> SimConfig:
    """Fresh config holding only defaults."""
    config = SimConfig()
    problems = config.validate()
    assert not problems, f"Built-in defaults are invalid: {problems}"
    return config


def apply_param_override(config: SimConfig, dotted_key: str, value: Any) -> None:
    """
    Set one value addressed as "section.field", e.g. "climate.rainfall".

    Raises:
        KeyError: If any part of the path does not exist.
    """
    *sections, name = dotted_key.split(".")
    target: Any = config
    for section in sections:
        if not hasattr(target, section):
            raise KeyError(f"Unknown config section '{section}' in '{dotted_key}'")
        target = getattr(target, section)
    if not hasattr(target, name):
        raise KeyError(f"Unknown config field '{name}' in '{dotted_key}'")
    setattr(target, name, value)


def parse_param_override(text: str) -> tuple[str, Any]:
    """
    Split a "section.field=value" string for `apply_param_override`.

    The value is read as JSON when it parses ("3", "null", "true"), and is
    kept as the raw string otherwise.

    Raises:
        ValueError: If there is no "=" or the key is empty.
    """
    key, sep, raw = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"Expected section.field=value, got '{text}'")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return key, value
