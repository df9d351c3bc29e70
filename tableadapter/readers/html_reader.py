"""
HTML Reader - Extract tables from HTML files and URLs

Parses the document with lxml and picks one <table> using a CSS selector
(cssselect) plus an occurrence index. Headings come from the markup header
chain, so documents without <thead>/<tbody> or without <th> cells still read.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional

import lxml.html
from cssselect import SelectorError
from lxml import etree

from tableadapter.errors import FileReaderError, NoMatchError
from tableadapter.readers.base import TabularReader
from tableadapter.readers.headings import MARKUP_STRATEGIES, Cell, Row, detect_headings

logger = logging.getLogger(__name__)

_EQ_SUFFIX = re.compile(r":eq\((-?\d+)\)\s*$")

_SECTION_TAGS = ("tbody", "tfoot")
_CELL_TAGS = ("td", "th")


def _cell_text(element) -> str:
    return " ".join(element.text_content().split())


class HtmlTable:
    """
    StructuredTable view over a <table> element

    Rows are read straight from the tree on every pass, so iteration stays
    lazy. Rows of nested tables are not part of this table.
    """

    def __init__(self, element):
        self.element = element

    def _rows(self, section) -> Iterator[Row]:
        for tr in section:
            if tr.tag != "tr":
                continue
            cells = [Cell(_cell_text(c), c.tag == "th") for c in tr if c.tag in _CELL_TAGS]
            if cells:
                yield cells

    def head_rows(self) -> Iterator[Row]:
        for child in self.element:
            if child.tag == "thead":
                yield from self._rows(child)

    def body_rows(self) -> Iterator[Row]:
        loose = []
        for child in self.element:
            if child.tag == "tr":
                loose.append(child)
                continue
            if loose:
                yield from self._rows(loose)
                loose = []
            if child.tag in _SECTION_TAGS:
                yield from self._rows(child)
        if loose:
            yield from self._rows(loose)


class HTMLReader(TabularReader):
    """
    Read one table from an HTML file or URL

    Example:
        # First table in the document
        reader = HTMLReader("data.html")

        # Second table matched by a selector
        reader = HTMLReader("page.html", "table.wikitable", index=1)

        # jQuery-style occurrence suffix
        reader = HTMLReader("page.html", "table:eq(2)")
    """

    strategies = MARKUP_STRATEGIES

    def __init__(
        self,
        source,
        selector: Optional[str] = None,
        index: int = 0,
    ):
        """
        Initialize HTML reader

        Args:
            source: Path to HTML file, URL or SourceLocator
            selector: CSS selector for the table. A trailing ":eq(N)" picks
                the Nth match before `index` is applied.
            index: Which match to read (0-indexed, negative counts from the end)

        Raises:
            SourceResolutionError: If the address is malformed
            FetchError: If the document cannot be fetched
            NoMatchError: If the selector matches no table
        """
        self.selector = selector
        self.index = index
        self._document = None
        super().__init__(source)

    def _parse(self, content: bytes) -> HtmlTable:
        try:
            self._document = lxml.html.document_fromstring(content)
        except (etree.ParserError, etree.XMLSyntaxError) as e:
            raise FileReaderError(f"Failed to parse HTML from {self.source}: {e}") from e

        return HtmlTable(self._select())

    def _select(self):
        """Apply selector and occurrence index to the parsed document"""
        matches = self._match()
        count = len(matches)

        if not -count <= self.index < count:
            raise NoMatchError(
                f"bad selector: {self._describe_selector()} matched {count} element(s), "
                f"index {self.index} out of range"
            ) from IndexError(self.index)

        element = matches[self.index]
        if element.tag != "table":
            table = element.find(".//table")
            if table is None:
                raise NoMatchError(
                    f"bad selector: {self._describe_selector()} matched <{element.tag}> "
                    "which contains no table"
                )
            element = table

        logger.debug("Selected table %d of %d in %s", self.index, count, self.source)
        return element

    def _match(self) -> list:
        if not self.selector:
            return list(self._document.iter("table"))

        selector = self.selector
        occurrence = None
        eq = _EQ_SUFFIX.search(selector)
        if eq is not None:
            occurrence = int(eq.group(1))
            selector = selector[: eq.start()].strip() or "*"

        try:
            matches = self._document.cssselect(selector)
        except SelectorError as e:
            raise NoMatchError(f"bad selector: {self.selector!r}: {e}") from e

        if occurrence is not None:
            if not -len(matches) <= occurrence < len(matches):
                return []
            return [matches[occurrence]]
        return matches

    def _describe_selector(self) -> str:
        return repr(self.selector) if self.selector else "'table'"

    def list_tables(self) -> List[str]:
        """
        List all tables found in the document

        Returns:
            List of table descriptions (first few headings and row count)
        """
        descriptions = []
        for i, element in enumerate(self._document.iter("table")):
            table = HtmlTable(element)
            headings = detect_headings(table, self.strategies)
            rows = sum(1 for _ in table.body_rows()) - (1 if headings.skip_first_body_row else 0)
            col_str = ", ".join(headings.names[:3])
            if len(headings.names) > 3:
                col_str += ", ..."
            descriptions.append(f"Table {i}: {col_str} ({rows} rows)")
        return descriptions
