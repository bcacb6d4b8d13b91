"""Services: configuration loading, CSV export and parallel workers."""

from .exporter import CsvExporter
from .fiscal_loader import load_economy_config, load_fiscal_config

__all__ = [
    "CsvExporter",
    "load_fiscal_config",
    "load_economy_config",
]
