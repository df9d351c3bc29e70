"""
Project operator - selects columns

Selects specific columns from rows (or all columns with *).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterator, List

from tableadapter.core.types import RowShape
from tableadapter.operators.base import Operator

if TYPE_CHECKING:
    from tableadapter.optimizers.cost_based import Cost, PlanMetadata


class Project(Operator):
    """
    Generic project operator, executed in memory

    Pulls rows from child and yields only the requested columns,
    in the requested order.
    """

    def __init__(self, child: Operator, columns: List[str]):
        """
        Initialize project operator

        Args:
            child: Child operator to pull rows from
            columns: List of column names to select (or ['*'] for all)
        """
        super().__init__(child)
        self.columns = list(columns)

    @property
    def is_star(self) -> bool:
        return self.columns == ["*"]

    def row_shape(self) -> RowShape:
        shape = self.child.row_shape()
        if self.is_star:
            return shape
        return shape.project(self.columns)

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        return metadata.cost_model.project_cost(metadata.row_count(self))

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        if self.is_star:
            yield from self.child
            return

        for row in self.child:
            # Missing column - set to None
            yield {col: row.get(col) for col in self.columns}

    def __repr__(self) -> str:
        col_str = ", ".join(self.columns)
        return f"{self.__class__.__name__}({col_str})"
