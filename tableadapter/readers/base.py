"""
Base reader interface for all external sources

All readers implement this interface to provide a consistent API
for the scan operator and the schema layer.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

from tableadapter.core.sources import SourceLocator, resolve_source
from tableadapter.core.types import RowShape
from tableadapter.readers.headings import (
    MARKUP_STRATEGIES,
    HeadingStrategy,
    Headings,
    StructuredTable,
    detect_headings,
)

logger = logging.getLogger(__name__)


class TabularReader:
    """
    Base class for all tabular readers

    Readers are responsible for:
    1. Resolving the source address (eagerly, at construction)
    2. Fetching and parsing the content once, at construction or refresh()
    3. Detecting the header row through a strategy chain
    4. Yielding data rows one at a time, as lists of cell text

    Every call to iter() starts a fresh forward pass over the already
    fetched document; nothing is re-fetched until refresh() is called.
    A reader is not safe for concurrent iteration from several threads.
    """

    strategies: Sequence[HeadingStrategy] = MARKUP_STRATEGIES

    def __init__(self, source):
        """
        Initialize reader

        Args:
            source: Path, URL or SourceLocator

        Raises:
            SourceResolutionError: If the address is malformed
            FetchError: If the content cannot be fetched
        """
        self.source: SourceLocator = resolve_source(source)
        self._table: Optional[StructuredTable] = None
        self._headings: Optional[Headings] = None
        self.refresh()

    def refresh(self) -> None:
        """
        Re-fetch and re-parse the source

        Raises:
            FetchError: If the content cannot be fetched
            NoMatchError: If the table locator no longer matches
        """
        content = self.source.fetch()
        logger.debug("Fetched %d bytes from %s", len(content), self.source)
        self._table = self._parse(content)
        self._headings = None

    def _parse(self, content: bytes) -> StructuredTable:
        """
        Parse fetched bytes and select the table to read

        Subclasses must implement this.
        """
        raise NotImplementedError("Subclasses must implement _parse()")

    def _detect(self) -> Headings:
        if self._headings is None:
            self._headings = detect_headings(self._table, self.strategies)
        return self._headings

    def get_headings(self) -> List[str]:
        """
        Column names of the table

        Idempotent; can be called before, during or after iteration.

        Returns:
            Column names (at least one)
        """
        return list(self._detect().names)

    def __iter__(self) -> Iterator[List[str]]:
        """
        Yield data rows in document order

        Row length is not guaranteed to match the headings.
        """
        headings = self._detect()
        rows = self._table.body_rows()
        if headings.skip_first_body_row:
            next(rows, None)
        for row in rows:
            yield [cell.text for cell in row]

    def read_lazy(self) -> Iterator[Dict[str, Optional[str]]]:
        """
        Yield rows as dictionaries keyed by heading

        Short rows are padded with None; cells beyond the last heading
        are dropped.
        """
        names = self.get_headings()
        for row in self:
            yield {name: (row[i] if i < len(row) else None) for i, name in enumerate(names)}

    def get_schema(self) -> RowShape:
        """Row shape of the table (all fields are untyped text)"""
        return RowShape.of(self.get_headings())

    def to_dataframe(self):
        """
        Convert reader content to pandas DataFrame

        Returns:
            pandas.DataFrame containing all rows as strings
        """
        try:
            import pandas as pd
        except ImportError as e:
            raise ImportError(
                "Pandas is required for to_dataframe(). Install `tableadapter[pandas]`"
            ) from e

        return pd.DataFrame(list(self.read_lazy()), columns=self.get_headings())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.source})"
