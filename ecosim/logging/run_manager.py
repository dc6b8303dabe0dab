"""
Run Manager for the Ecosystem Simulator.

Gives a single run its own output directory:
  - a timestamped directory under a base output path
  - the config the run was started with
  - the per-tick metrics CSV and a closing summary
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from ecosim.core.config import SimConfig, save_config
from ecosim.logging.csv_logger import CSVLogger


class RunManager:
    """
    Manages one simulation run's output directory.

    Directory structure:
        {base_dir}/{run_name}/
            config.json     - the simulation config
            metrics.csv     - per-tick KPIs
            summary.json    - written by finalize()

    Attributes:
        run_dir: Path to this run's output directory.
        csv_logger: CSVLogger for the metrics file.
    """

    def __init__(
        self,
        config: SimConfig,
        base_dir: Optional[str | Path] = None,
        run_name: Optional[str] = None,
        log_every: int = 1,
    ):
        """
        Create the run directory and write the config into it.

        Args:
            config: Simulation configuration (saved as config.json).
            base_dir: Base output directory. None = config.viz.output_dir.
            run_name: Subdirectory name. None = current timestamp.
            log_every: Tick sampling interval for the metrics CSV.
        """
        if base_dir is None:
            base_dir = config.viz.output_dir
        if run_name is None:
            run_name = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.run_dir = Path(base_dir) / run_name
        self.run_dir.mkdir(parents=True, exist_ok=True)

        self._config_path = self.run_dir / "config.json"
        save_config(config, self._config_path)

        self.csv_logger = CSVLogger(self.run_dir / "metrics.csv", every=log_every)

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def metrics_path(self) -> Path:
        return self.csv_logger.file_path

    @property
    def summary_path(self) -> Path:
        return self.run_dir / "summary.json"

    def log_tick(self, kpi_dict: dict) -> bool:
        """Log one tick's KPIs to the metrics CSV."""
        return self.csv_logger.log_row(kpi_dict)

    def finalize(self, summary: Optional[dict] = None) -> None:
        """
        Close the metrics file and write summary.json if a summary is given.
        """
        self.csv_logger.close()
        if summary is not None:
            with open(self.summary_path, "w", encoding="utf-8") as f:
                json.dump(summary, f, indent=2, ensure_ascii=False)

    def __repr__(self) -> str:
        return f"RunManager(run_dir='{self.run_dir}')"
