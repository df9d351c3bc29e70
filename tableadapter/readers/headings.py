"""
Header detection

Real-world tables often lack a <thead>, or mark nothing as a header at all.
Rather than fail, readers run an ordered chain of strategies; each one either
returns a Headings result or None, and the first result wins. The last
strategy in every chain always succeeds.

Markup chain:
1. header_section - explicit header rows (<thead>)
2. header_cells   - first body row made only of header cells (<th>)
3. label_row      - first body row that reads like column labels
4. positional     - column0, column1, ... sized to the widest row
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Optional, Protocol

from tableadapter.core.types import parse_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cell:
    """One cell of a structural row"""

    text: str
    header: bool = False


Row = Sequence[Cell]


class StructuredTable(Protocol):
    """Row access a reader exposes to the header strategies"""

    def head_rows(self) -> Iterator[Row]: ...

    def body_rows(self) -> Iterator[Row]: ...


@dataclass
class RowTable:
    """In-memory StructuredTable backed by lists of rows"""

    body: list[Row]
    head: list[Row] = field(default_factory=list)

    def head_rows(self) -> Iterator[Row]:
        return iter(self.head)

    def body_rows(self) -> Iterator[Row]:
        return iter(self.body)


@dataclass(frozen=True)
class Headings:
    """
    Result of header detection

    Attributes:
        names: Column names, never empty
        skip_first_body_row: The first body row was promoted to the header
            and must not be yielded as data
        strategy: Name of the strategy that produced the result
    """

    names: list[str]
    skip_first_body_row: bool = False
    strategy: str = ""


HeadingStrategy = Callable[[StructuredTable], Optional[Headings]]


def positional_names(width: int) -> list[str]:
    """Synthesized names: column0, column1, ..."""
    return [f"column{i}" for i in range(width)]


def unique_names(names: Sequence[str]) -> list[str]:
    """
    Make column names distinct

    Repeats get a _1, _2, ... suffix so that every cell keeps a column of
    its own: ["a", "a", "b"] becomes ["a", "a_1", "b"].
    """
    used: set[str] = set()
    result = []
    for name in names:
        candidate, n = name, 0
        while candidate in used:
            n += 1
            candidate = f"{name}_{n}"
        used.add(candidate)
        result.append(candidate)
    return result


def _names_from(row: Row) -> list[str]:
    # Blank label cells fall back to their positional name
    return unique_names([cell.text or f"column{i}" for i, cell in enumerate(row)])


def _first(rows: Iterator[Row]) -> Row | None:
    return next(rows, None)


def header_section(table: StructuredTable) -> Headings | None:
    """Use the explicit header section; the last header row holds the leaf labels"""
    last = None
    for row in table.head_rows():
        if row:
            last = row
    if last is None:
        return None
    return Headings(_names_from(last), False, "header_section")


def header_cells(table: StructuredTable) -> Headings | None:
    """Promote the first body row when every cell in it is a header cell"""
    row = _first(table.body_rows())
    if not row or not all(cell.header for cell in row):
        return None
    return Headings(_names_from(row), True, "header_cells")


def label_row(table: StructuredTable) -> Headings | None:
    """
    Promote the first body row when it reads like column labels

    Labels are non-empty, not numeric, and distinct from each other.
    """
    row = _first(table.body_rows())
    if not row:
        return None

    texts = [cell.text for cell in row]
    if any(not text for text in texts):
        return None
    if any(parse_number(text) is not None for text in texts):
        return None
    if len(set(texts)) != len(texts):
        return None

    return Headings(unique_names(texts), True, "label_row")


def first_record(table: StructuredTable) -> Headings | None:
    """Delimited files: the first record is the native header"""
    row = _first(table.body_rows())
    if not row:
        return None
    return Headings(_names_from(row), True, "first_record")


def positional(table: StructuredTable) -> Headings:
    """Synthesize names sized to the widest row; always succeeds"""
    width = max((len(row) for row in table.body_rows()), default=0)
    return Headings(positional_names(max(width, 1)), False, "positional")


MARKUP_STRATEGIES: tuple[HeadingStrategy, ...] = (
    header_section,
    header_cells,
    label_row,
    positional,
)

RECORD_STRATEGIES: tuple[HeadingStrategy, ...] = (first_record, positional)

HEADERLESS_STRATEGIES: tuple[HeadingStrategy, ...] = (positional,)


def detect_headings(
    table: StructuredTable,
    strategies: Sequence[HeadingStrategy] = MARKUP_STRATEGIES,
) -> Headings:
    """
    Run the strategy chain and return the first result

    Args:
        table: Table to inspect
        strategies: Ordered strategies; positional naming is the implicit
            last step of every chain

    Returns:
        Headings
    """
    for strategy in strategies:
        if strategy is positional:
            break
        result = strategy(table)
        if result is not None:
            logger.debug("Headings resolved by %s: %s", result.strategy, result.names)
            return result
        logger.debug("Header strategy %s found no match", strategy.__name__)

    result = positional(table)
    logger.debug("Falling back to positional headings: %s", result.names)
    return result
