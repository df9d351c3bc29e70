"""
GroupBy Operator

Performs hash-based aggregation with GROUP BY support.
Groups rows by specified columns and computes aggregate functions.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from tableadapter.core.expressions import AggregateFunction
from tableadapter.core.types import Field, RowShape
from tableadapter.operators.base import Operator
from tableadapter.utils.aggregates import group_rows

if TYPE_CHECKING:
    from tableadapter.optimizers.cost_based import Cost, PlanMetadata

# Fraction of input rows assumed to survive grouping
GROUP_REDUCTION = 0.1


def aggregate_shape(input_shape: RowShape, group_by: list[str], aggregates: list[AggregateFunction]) -> RowShape:
    """Row shape of an aggregation: group columns, then aggregate outputs"""
    fields = [input_shape.field(col) for col in group_by]
    fields.extend(Field(agg.output_name, 0, agg.result_type) for agg in aggregates)
    return RowShape(fields)


class GroupBy(Operator):
    """
    Generic GROUP BY operator with aggregation, executed in memory

    Note: This operator materializes all groups in memory (not lazy).
    """

    def __init__(
        self,
        child: Operator,
        group_by: list[str],
        aggregates: list[AggregateFunction],
    ):
        """
        Initialize GroupBy operator

        Args:
            child: Source operator
            group_by: List of columns to group by (empty for a global aggregate)
            aggregates: List of aggregate functions to compute
        """
        super().__init__(child)
        self.group_by = list(group_by)
        self.aggregates = list(aggregates)

    def row_shape(self) -> RowShape:
        return aggregate_shape(self.child.row_shape(), self.group_by, self.aggregates)

    def estimate_row_count(self, metadata: PlanMetadata) -> float:
        if not self.group_by:
            return 1.0
        return max(1.0, metadata.row_count(self.child) * GROUP_REDUCTION)

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        return metadata.cost_model.aggregate_cost(
            metadata.row_count(self.child), metadata.row_count(self)
        )

    def __iter__(self) -> Iterator[dict[str, Any]]:
        yield from group_rows(self.child, self.group_by, self.aggregates)

    def __repr__(self) -> str:
        aggs = ", ".join(str(a) for a in self.aggregates)
        return f"{self.__class__.__name__}(keys={self.group_by}, {aggs})"
