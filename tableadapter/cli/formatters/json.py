"""
JSON formatter for machine-readable output
"""

import json
from typing import Any, Dict, List, Optional

from tableadapter.cli.formatters.base import BaseFormatter


class JSONFormatter(BaseFormatter):
    """Format rows as a JSON array of objects"""

    def format(self, results: List[Dict[str, Any]], columns: Optional[List[str]] = None, **kwargs) -> str:
        """
        Format rows as JSON

        Args:
            results: List of row dictionaries
            columns: Keys to keep, in order
            **kwargs: Options like 'compact', 'indent'

        Returns:
            JSON string
        """
        columns = self.resolve_columns(results, columns)
        records = [{col: row.get(col) for col in columns} for row in results]

        if kwargs.get("compact", False):
            return json.dumps(records, separators=(",", ":"), default=str)
        return json.dumps(records, indent=kwargs.get("indent", 2), default=str)
