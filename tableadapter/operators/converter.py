"""
Converter from the EXTERNAL convention to ENUMERABLE

Sits on top of an external subtree. Pulling rows from it implements the
subtree into one ExternalQuery and streams that query's results.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from tableadapter.core.traits import Convention
from tableadapter.core.types import RowShape
from tableadapter.operators.base import Operator
from tableadapter.operators.external import ExternalQuery, Implementor

if TYPE_CHECKING:
    from tableadapter.optimizers.cost_based import Cost, PlanMetadata


class EnumerableConverter(Operator):
    """Row-iterator execution of an external subtree"""

    convention = Convention.ENUMERABLE

    def row_shape(self) -> RowShape:
        return self.child.row_shape()

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        cost_model = metadata.cost_model
        return cost_model.project_cost(metadata.row_count(self)).multiply_by(cost_model.PUSHDOWN_DISCOUNT)

    def implement(self) -> ExternalQuery:
        """Build the request for the external subtree"""
        implementor = Implementor()
        implementor.visit(self.child)
        return implementor.build()

    def __iter__(self) -> Iterator[dict[str, Any]]:
        yield from self.implement().execute()
