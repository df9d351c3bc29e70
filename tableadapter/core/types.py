"""Row shapes for external relations.

Readers hand out untyped cell text. This module describes the ordered field
layout of a relation (its row shape) and offers the small amount of numeric
coercion that filters and aggregates need when comparing cell text.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any


class DataType(Enum):
    """Column types known to the adapter."""

    STRING = "STRING"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"

    def __str__(self) -> str:
        return self.value

    def is_numeric(self) -> bool:
        """Check if type is numeric (INTEGER or FLOAT)."""
        return self in (DataType.INTEGER, DataType.FLOAT)


def parse_number(value: Any) -> int | float | None:
    """Interpret a cell value as a number.

    Handles thousands separators ("1,234") and surrounding whitespace, which
    are common in scraped tables.

    Args:
        value: Cell text or an already numeric value

    Returns:
        int or float if the value is numeric, None otherwise
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip().replace(",", "")
    if not text:
        return None

    try:
        return int(text)
    except ValueError:
        pass

    try:
        return float(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class Field:
    """A named, positioned column of a row shape."""

    name: str
    index: int
    type: DataType = DataType.STRING

    def __repr__(self) -> str:
        return f"{self.name}: {self.type}"


class RowShape:
    """Ordered sequence of fields describing the rows of a relation.

    Row shapes are immutable. Projection builds a new shape.
    """

    def __init__(self, fields: Sequence[Field]):
        """Initialize row shape.

        Args:
            fields: Fields in output order. Indexes are renumbered 0..n-1.
        """
        self._fields = tuple(
            Field(f.name, i, f.type) for i, f in enumerate(fields)
        )

    @classmethod
    def of(cls, names: Sequence[str], type: DataType = DataType.STRING) -> "RowShape":
        """Build a shape from column names that all share one type."""
        return cls([Field(name, i, type) for i, name in enumerate(names)])

    @property
    def fields(self) -> tuple[Field, ...]:
        return self._fields

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self._fields]

    @property
    def field_count(self) -> int:
        return len(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields)

    def __contains__(self, name: str) -> bool:
        return any(f.name == name for f in self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RowShape):
            return NotImplemented
        return [(f.name, f.type) for f in self] == [(f.name, f.type) for f in other]

    def __hash__(self) -> int:
        return hash(tuple((f.name, f.type) for f in self._fields))

    def __repr__(self) -> str:
        return f"RowShape({', '.join(repr(f) for f in self._fields)})"

    def field(self, name: str) -> Field:
        """Get a field by name.

        Raises:
            KeyError: If no field has that name
        """
        for f in self._fields:
            if f.name == name:
                return f
        available = ", ".join(self.field_names)
        raise KeyError(f"Field '{name}' not found. Available fields: {available}")

    def project(self, names: Sequence[str]) -> "RowShape":
        """Build a shape holding only the named fields, in the given order."""
        return RowShape([self.field(name) for name in names])

    def is_projection_of(self, native: "RowShape") -> bool:
        """Check that every field exists in `native` and keeps its relative order."""
        previous = -1
        for f in self._fields:
            if f.name not in native:
                return False
            position = native.field(f.name).index
            if position <= previous:
                return False
            previous = position
        return True
