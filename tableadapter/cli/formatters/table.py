"""
Rich table formatter for terminal output
"""

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tableadapter.cli.formatters.base import BaseFormatter


class TableFormatter(BaseFormatter):
    """Format rows as a Rich table"""

    def format(self, results: List[Dict[str, Any]], columns: Optional[List[str]] = None, **kwargs) -> str:
        """
        Format rows as a Rich table

        Args:
            results: List of row dictionaries
            columns: Column order
            **kwargs: Options like 'no_color', 'show_footer', 'title'

        Returns:
            Formatted table string
        """
        columns = self.resolve_columns(results, columns)
        if not columns:
            return "No results found."

        console = Console(force_terminal=not kwargs.get("no_color", False), no_color=kwargs.get("no_color", False))

        # Narrow terminal or many columns: truncate harder
        if console.width < 80 or len(columns) > 8:
            table = Table(show_header=True, header_style="bold magenta", box=box.SIMPLE, title=kwargs.get("title"))
            max_width, wrap = kwargs.get("max_width", 15), False
        else:
            table = Table(show_header=True, header_style="bold magenta", title=kwargs.get("title"))
            max_width, wrap = 30, True

        for col in columns:
            table.add_column(escape(col), style="cyan", overflow="ellipsis", max_width=max_width, no_wrap=not wrap)

        for row in results:
            # Missing cells render as a dim NULL
            table.add_row(*[escape(str(row[col])) if row.get(col) is not None else "[dim]NULL[/dim]" for col in columns])

        with console.capture() as capture:
            console.print(table)
            if kwargs.get("show_footer", True):
                count = len(results)
                console.print(f"[dim]{count} row{'s' if count != 1 else ''}[/dim]")

        return capture.get()
