"""
Aggregation function implementations

Provides COUNT, SUM, AVG, MIN, MAX over untyped cell text.
Each aggregator maintains state and can be updated incrementally.
"""

from collections.abc import Iterable, Iterator
from typing import Any, List, Optional

from tableadapter.core.expressions import AggregateFunction
from tableadapter.core.types import parse_number


class Aggregator:
    """Base class for aggregators"""

    def update(self, value: Any) -> None:
        """Update aggregator with a new value"""
        raise NotImplementedError

    def result(self) -> Any:
        """Get final aggregated result"""
        raise NotImplementedError


class CountAggregator(Aggregator):
    """COUNT aggregator - counts non-empty values"""

    def __init__(self, count_star: bool = False):
        """
        Initialize COUNT aggregator

        Args:
            count_star: If True, counts all rows (COUNT(*))
                       If False, counts non-empty cells (COUNT(column))
        """
        self.count_star = count_star
        self.count = 0

    def update(self, value: Any) -> None:
        if self.count_star or value not in (None, ""):
            self.count += 1

    def result(self) -> int:
        return self.count


class SumAggregator(Aggregator):
    """SUM aggregator - sums cells that parse as numbers"""

    def __init__(self):
        self.sum: Optional[float] = None

    def update(self, value: Any) -> None:
        number = parse_number(value)
        if number is None:
            return
        self.sum = number if self.sum is None else self.sum + number

    def result(self) -> Optional[float]:
        return self.sum


class AvgAggregator(Aggregator):
    """AVG aggregator - averages cells that parse as numbers"""

    def __init__(self):
        self.sum = 0
        self.count = 0

    def update(self, value: Any) -> None:
        number = parse_number(value)
        if number is None:
            return
        self.sum += number
        self.count += 1

    def result(self) -> Optional[float]:
        if self.count == 0:
            return None
        return self.sum / self.count


class _ExtremeAggregator(Aggregator):
    """
    Shared MIN/MAX logic

    Compares numerically while every value seen is numeric, and falls back
    to text comparison as soon as one is not.
    """

    def __init__(self):
        self.values: List[Any] = []

    def update(self, value: Any) -> None:
        if value in (None, ""):
            return
        self.values.append(value)

    def _pick(self, choose):
        if not self.values:
            return None
        numbers = [parse_number(v) for v in self.values]
        if all(n is not None for n in numbers):
            return choose(numbers)
        return choose(str(v) for v in self.values)


class MinAggregator(_ExtremeAggregator):
    """MIN aggregator - finds minimum value"""

    def result(self) -> Optional[Any]:
        return self._pick(min)


class MaxAggregator(_ExtremeAggregator):
    """MAX aggregator - finds maximum value"""

    def result(self) -> Optional[Any]:
        return self._pick(max)


def create_aggregator(function: str, column: str) -> Aggregator:
    """
    Factory function to create appropriate aggregator

    Args:
        function: Aggregate function name (COUNT, SUM, AVG, MIN, MAX)
        column: Column name (or '*' for COUNT(*))

    Returns:
        Aggregator instance

    Raises:
        ValueError: If function is not recognized
    """
    function = function.upper()

    if function == "COUNT":
        return CountAggregator(count_star=(column == "*"))
    elif function == "SUM":
        return SumAggregator()
    elif function == "AVG":
        return AvgAggregator()
    elif function == "MIN":
        return MinAggregator()
    elif function == "MAX":
        return MaxAggregator()
    else:
        raise ValueError(f"Unknown aggregate function: {function}")


def group_rows(
    rows: Iterable[dict[str, Any]],
    group_by: List[str],
    aggregates: List[AggregateFunction],
) -> Iterator[dict[str, Any]]:
    """
    Hash-based grouping with aggregation

    Materializes one set of aggregators per group, then yields one row per
    group in first-seen order. With no group columns and no input rows a
    single row of empty aggregates is still produced.

    Args:
        rows: Input rows
        group_by: Columns to group by
        aggregates: Aggregate calls to compute per group

    Yields:
        Rows with group columns followed by aggregate outputs
    """
    groups: dict[tuple, list] = {}

    for row in rows:
        key = tuple(row.get(col) for col in group_by)
        if key not in groups:
            groups[key] = [create_aggregator(a.function, a.column) for a in aggregates]
        for agg_func, aggregator in zip(aggregates, groups[key]):
            aggregator.update(row if agg_func.column == "*" else row.get(agg_func.column))

    if not groups and not group_by:
        groups[()] = [create_aggregator(a.function, a.column) for a in aggregates]

    for key, aggregators in groups.items():
        output = dict(zip(group_by, key))
        for agg_func, aggregator in zip(aggregates, aggregators):
            output[agg_func.output_name] = aggregator.result()
        yield output
