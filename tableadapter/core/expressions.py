"""
Expressions that generic operators carry and pushdown rules move

These dataclasses are the engine-side expressions: simple column
comparisons and aggregate calls. Values in external rows are untyped text,
so comparisons coerce the cell to the literal's type when they can.
"""

from dataclasses import dataclass
from typing import Any

from tableadapter.core.types import DataType, parse_number

OPERATORS = ("=", "!=", ">", "<", ">=", "<=")
AGGREGATE_FUNCTIONS = ("COUNT", "SUM", "AVG", "MIN", "MAX")


@dataclass(frozen=True)
class Condition:
    """A single WHERE condition: column operator value"""

    column: str
    operator: str  # '=', '!=', '>', '<', '>=', '<='
    value: Any

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"Unknown operator: {self.operator}")

    def __repr__(self) -> str:
        return f"{self.column} {self.operator} {self.value!r}"

    def evaluate(self, row: dict[str, Any]) -> bool:
        """
        Evaluate this condition against a row

        Numeric literals compare numerically against cell text that parses
        as a number; everything else compares as text. Missing or empty
        cells never match.

        Args:
            row: Row keyed by column name

        Returns:
            True if condition is satisfied
        """
        cell = row.get(self.column)
        if cell is None or cell == "":
            return False

        expected = self.value
        if isinstance(expected, (int, float)) and not isinstance(expected, bool):
            actual = parse_number(cell)
            if actual is None:
                return False
        else:
            actual = str(cell)
            expected = str(expected)

        op = self.operator
        if op == "=":
            return actual == expected
        elif op == "!=":
            return actual != expected
        elif op == ">":
            return actual > expected
        elif op == "<":
            return actual < expected
        elif op == ">=":
            return actual >= expected
        else:
            return actual <= expected

    def to_dict(self) -> dict[str, Any]:
        return {"column": self.column, "op": self.operator, "value": self.value}


@dataclass(frozen=True)
class AggregateFunction:
    """
    Represents an aggregate call

    Examples:
        COUNT(*), COUNT(id), SUM(amount), AVG(price), MIN(age), MAX(age)
    """

    function: str  # 'COUNT', 'SUM', 'AVG', 'MIN', 'MAX'
    column: str  # Column name, or '*' for COUNT(*)
    alias: str | None = None

    def __post_init__(self):
        if self.function.upper() not in AGGREGATE_FUNCTIONS:
            raise ValueError(f"Unknown aggregate function: {self.function}")
        if self.column == "*" and self.function.upper() != "COUNT":
            raise ValueError(f"{self.function}(*) is not supported")

    def __repr__(self) -> str:
        result = f"{self.function}({self.column})"
        if self.alias:
            result += f" AS {self.alias}"
        return result

    @property
    def output_name(self) -> str:
        """Column name of the aggregated value"""
        if self.alias:
            return self.alias
        column = "star" if self.column == "*" else self.column
        return f"{self.function.lower()}_{column}"

    @property
    def result_type(self) -> DataType:
        function = self.function.upper()
        if function == "COUNT":
            return DataType.INTEGER
        if function in ("SUM", "AVG"):
            return DataType.FLOAT
        return DataType.STRING

    def to_dict(self) -> dict[str, Any]:
        return {"fn": self.function.upper(), "column": self.column, "as": self.output_name}
