"""
CSV formatter for piping rows into other tools
"""

import csv
import io
from typing import Any, Dict, List, Optional

from tableadapter.cli.formatters.base import BaseFormatter


class CSVFormatter(BaseFormatter):
    """Format rows as CSV"""

    def format(self, results: List[Dict[str, Any]], columns: Optional[List[str]] = None, **kwargs) -> str:
        """
        Format rows as CSV

        The header line is written even when there are no rows, as long as
        the columns are known. Missing cells are written empty.

        Args:
            results: List of row dictionaries
            columns: Column order
            **kwargs: Options like 'delimiter'

        Returns:
            CSV string
        """
        columns = self.resolve_columns(results, columns)
        if not columns:
            return ""

        output = io.StringIO()
        writer = csv.DictWriter(
            output,
            fieldnames=columns,
            delimiter=kwargs.get("delimiter", ","),
            extrasaction="ignore",
            lineterminator="\n",
        )
        writer.writeheader()
        writer.writerows(results)

        return output.getvalue()
