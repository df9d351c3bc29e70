"""
Filter operator - keeps rows matching all conditions

Evaluates conditions and only yields rows that match.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from tableadapter.core.expressions import Condition
from tableadapter.core.types import RowShape
from tableadapter.operators.base import Operator

if TYPE_CHECKING:
    from tableadapter.optimizers.cost_based import Cost, PlanMetadata


class Filter(Operator):
    """
    Generic filter operator, executed in memory

    Pulls rows from child and only yields those that satisfy
    all conditions (AND logic).
    """

    def __init__(self, child: Operator, conditions: list[Condition]):
        """
        Initialize filter operator

        Args:
            child: Child operator to pull rows from
            conditions: List of conditions (AND'd together)
        """
        super().__init__(child)
        self.conditions = list(conditions)

    def row_shape(self) -> RowShape:
        return self.child.row_shape()

    def estimate_row_count(self, metadata: PlanMetadata) -> float:
        return metadata.row_count(self.child) * metadata.selectivity(self.conditions)

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        return metadata.cost_model.filter_cost(
            metadata.row_count(self.child), metadata.row_count(self)
        )

    def __iter__(self) -> Iterator[dict[str, Any]]:
        for row in self.child:
            if all(condition.evaluate(row) for condition in self.conditions):
                yield row

    def __repr__(self) -> str:
        cond_str = " AND ".join(str(c) for c in self.conditions)
        return f"{self.__class__.__name__}({cond_str})"
