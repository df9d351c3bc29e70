"""
Delimited file reader (CSV/TSV)

Uses Python's built-in csv module. The whole file is one table, so there is
no table locator; the first record is the native header unless the file is
declared headerless, in which case names are positional.
"""

import csv
import io
from typing import Iterator, Optional

from tableadapter.errors import FileReaderError
from tableadapter.readers.base import TabularReader
from tableadapter.readers.headings import (
    HEADERLESS_STRATEGIES,
    RECORD_STRATEGIES,
    Cell,
    Row,
)


class DelimitedTable:
    """StructuredTable over decoded delimited text; blank lines are skipped"""

    def __init__(self, text: str, delimiter: str):
        self.text = text
        self.delimiter = delimiter

    def head_rows(self) -> Iterator[Row]:
        return iter(())

    def body_rows(self) -> Iterator[Row]:
        for record in csv.reader(io.StringIO(self.text, newline=""), delimiter=self.delimiter):
            if record:
                yield [Cell(value) for value in record]


class CSVReader(TabularReader):
    """
    Lazy delimited-file reader

    Example:
        reader = CSVReader("DEPTS.csv")
        reader.get_headings()  # ['DEPTNO', 'NAME']
        for row in reader:
            print(row)         # ['10', 'Sales']
    """

    def __init__(
        self,
        source,
        delimiter: Optional[str] = None,
        encoding: str = "utf-8-sig",
        has_header: bool = True,
    ):
        """
        Initialize CSV reader

        Args:
            source: Path, URL or SourceLocator
            delimiter: Field delimiter (default: tab for .tsv, comma otherwise)
            encoding: Text encoding (default strips a UTF-8 BOM)
            has_header: Whether the first record holds column names
        """
        self.delimiter = delimiter
        self.encoding = encoding
        self.has_header = has_header
        self.strategies = RECORD_STRATEGIES if has_header else HEADERLESS_STRATEGIES
        super().__init__(source)

    def _parse(self, content: bytes) -> DelimitedTable:
        try:
            text = content.decode(self.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise FileReaderError(
                f"Failed to decode {self.source} as {self.encoding}: {e}"
            ) from e

        if self.delimiter is None:
            self.delimiter = "\t" if self.source.suffix == ".tsv" else ","
        return DelimitedTable(text, self.delimiter)
