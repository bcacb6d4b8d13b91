"""Export services for simulation results.

Writes the balance sheet and cash flow time series to CSV files.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from patrimoine.core.logging import get_logger

if TYPE_CHECKING:
    from patrimoine.application.services.simulation import SimulationResult

log = get_logger(__name__)

CSV_SEPARATOR = ";"
BALANCE_SHEET_FILE = "BalanceSheet.csv"
CASH_FLOW_FILE = "CashFlow.csv"


class CsvExporter:
    """Handles exporting of simulation results."""

    def __init__(self, output_dir: str | os.PathLike = "results"):
        """Initialize exporter.

        Args:
            output_dir: Directory where results will be saved.
        """
        self.output_dir = Path(output_dir)

    def _ensure_dir(self, path: Path) -> None:
        """Ensure output directory exists."""
        if not path.exists():
            path.mkdir(parents=True)
            log.info("created_output_directory", path=str(path))

    def export(self, result: SimulationResult, title: str) -> Path:
        """Save both time series as CSV files.

        Args:
            result: Computed simulation result.
            title: Name of the sub-directory receiving the files.

        Returns:
            Path of the directory holding the files.
        """
        directory = self.output_dir / title
        self._ensure_dir(directory)

        frames = {
            BALANCE_SHEET_FILE: result.balance_sheet_frame(),
            CASH_FLOW_FILE: result.cash_flow_frame(),
        }
        for filename, frame in frames.items():
            filepath = directory / filename
            try:
                frame.to_csv(filepath, sep=CSV_SEPARATOR, index=False, encoding="utf-8")
            except OSError as e:
                log.error("results_save_failed", path=str(filepath), error=str(e))
                raise

        log.info("results_exported", path=str(directory), rows=len(result.balance_sheet))
        return directory
