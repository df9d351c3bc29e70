"""
Output formatters for CLI

Available formatters:
- TableFormatter: Rich tables for the terminal
- JSONFormatter: Machine-readable JSON
- CSVFormatter: Unix-friendly CSV
"""

from tableadapter.cli.formatters.base import BaseFormatter
from tableadapter.cli.formatters.csv import CSVFormatter
from tableadapter.cli.formatters.json import JSONFormatter
from tableadapter.cli.formatters.table import TableFormatter

__all__ = ["BaseFormatter", "TableFormatter", "JSONFormatter", "CSVFormatter", "get_formatter"]

FORMATTERS = {
    "table": TableFormatter,
    "json": JSONFormatter,
    "csv": CSVFormatter,
}


def get_formatter(format_name: str) -> BaseFormatter:
    """
    Get formatter by name

    Args:
        format_name: Name of formatter (table, json, csv)

    Returns:
        Formatter instance

    Raises:
        ValueError: If formatter not found
    """
    if format_name not in FORMATTERS:
        available = ", ".join(FORMATTERS)
        raise ValueError(f"Unknown format: {format_name}. Available formats: {available}")

    return FORMATTERS[format_name]()
