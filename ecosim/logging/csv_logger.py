"""
CSV Logger for the Ecosystem Simulator.

Writes one KPI row per tick. A run can last tens of thousands of ticks, so
the file stays open between rows; use the logger as a context manager or
call `close()` when the run ends.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Optional, TextIO

from ecosim.simulation.metrics import MetricsCollector


class CSVLogger:
    """
    Logs tick KPIs to a CSV file.

    Usage:
        with CSVLogger("runs/my_run/metrics.csv", every=10) as log:
            log.log_row(kpi_dict)

    Attributes:
        file_path: Path to the CSV file.
        columns: Ordered list of column names.
        every: Only ticks divisible by this value are written (1 = all).
        rows_written: Number of data rows written so far.
    """

    def __init__(
        self,
        file_path: str | Path,
        columns: Optional[list[str]] = None,
        every: int = 1,
    ):
        """
        Args:
            file_path: Output CSV path. Parent directory is created if needed.
            columns: Ordered column names. None = MetricsCollector.kpi_names().
            every: Tick sampling interval (must be >= 1).

        Raises:
            ValueError: If every < 1.
        """
        if every < 1:
            raise ValueError(f"every must be >= 1, got {every}")
        self.file_path = Path(file_path)
        self.columns = columns or MetricsCollector.kpi_names()
        self.every = every
        self.rows_written = 0
        self._handle: Optional[TextIO] = None
        self._writer: Optional[csv.DictWriter] = None

        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def _open(self) -> csv.DictWriter:
        if self._writer is None:
            self._handle = open(self.file_path, "w", newline="", encoding="utf-8")
            self._writer = csv.DictWriter(self._handle, fieldnames=self.columns, extrasaction="ignore")
            self._writer.writeheader()
        return self._writer

    def log_row(self, kpi_dict: dict) -> bool:
        """
        Write one KPI row if its tick falls on the sampling interval.

        Rows without a 'tick' key are always written.

        Returns:
            True if the row was written.
        """
        tick = kpi_dict.get("tick")
        if tick is not None and tick % self.every != 0:
            return False
        writer = self._open()
        writer.writerow(kpi_dict)
        self.rows_written += 1
        return True

    def flush(self) -> None:
        if self._handle is not None:
            self._handle.flush()

    def close(self) -> None:
        """Close the underlying file. Further rows reopen and truncate it."""
        if self._handle is not None:
            self._handle.close()
        self._handle = None
        self._writer = None

    def read_back(self) -> list[dict]:
        """Read back all rows (as strings) from the CSV file."""
        self.flush()
        if not self.file_path.exists():
            return []
        with open(self.file_path, "r", encoding="utf-8") as f:
            return list(csv.DictReader(f))

    def __enter__(self) -> CSVLogger:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
