"""
Base formatter interface for CLI output

Every formatter renders a list of row dicts plus the column order to show.
"""

from typing import Any, Dict, List, Optional


class BaseFormatter:
    """Base class for all output formatters"""

    def format(self, results: List[Dict[str, Any]], columns: Optional[List[str]] = None, **kwargs) -> str:
        """
        Format rows for output

        Args:
            results: List of row dictionaries
            columns: Column order; taken from the first row when omitted
            **kwargs: Additional formatter-specific options

        Returns:
            Formatted string ready for output
        """
        raise NotImplementedError("Formatters must implement format() method")

    @staticmethod
    def resolve_columns(results: List[Dict[str, Any]], columns: Optional[List[str]]) -> List[str]:
        if columns is not None:
            return list(columns)
        return list(results[0].keys()) if results else []

    def get_name(self) -> str:
        """Get formatter name"""
        return self.__class__.__name__.replace("Formatter", "").lower()
