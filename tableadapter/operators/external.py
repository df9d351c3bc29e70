"""
Pushdown operators and the request they produce

When the planner rewrites a generic filter, project or aggregate that sits on
an external scan, the result is one of the operators below. They live in the
EXTERNAL convention: instead of being pulled one by one, the whole external
subtree is implemented into a single ExternalQuery - an ordered list of
stages handed to the source, much like an aggregation pipeline.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any, Optional

from tableadapter.core.traits import Convention
from tableadapter.operators.filter import Filter
from tableadapter.operators.groupby import GroupBy
from tableadapter.operators.project import Project
from tableadapter.utils.aggregates import group_rows

if TYPE_CHECKING:
    from tableadapter.optimizers.cost_based import Cost, PlanMetadata


def _filter_rows(rows: Iterable[dict], conditions) -> Iterator[dict]:
    for row in rows:
        if all(condition.evaluate(row) for condition in conditions):
            yield row


def _project_rows(rows: Iterable[dict], columns) -> Iterator[dict]:
    for row in rows:
        yield {col: row.get(col) for col in columns}


class ExternalQuery:
    """
    Request for the external source: a scan followed by stages

    Stages are ("filter", [Condition]), ("project", [column]) and
    ("group", (keys, [AggregateFunction])), applied in order.
    """

    def __init__(self, scan, stages: Optional[list[tuple[str, Any]]] = None):
        self.scan = scan
        self.stages = list(stages or [])

    def describe(self) -> dict[str, Any]:
        """Plain-dict rendering of the request"""
        relation = self.scan.relation
        pipeline = []
        for stage, arg in self.stages:
            if stage == "filter":
                pipeline.append({"$filter": [c.to_dict() for c in arg]})
            elif stage == "project":
                pipeline.append({"$project": list(arg)})
            else:
                keys, aggregates = arg
                pipeline.append({"$group": {"keys": list(keys), "aggregates": [a.to_dict() for a in aggregates]}})
        return {
            "table": ".".join(self.scan.table),
            "source": str(relation.source),
            "selector": relation.selector,
            "index": relation.index,
            "fields": self.scan.derive_row_type().field_names,
            "pipeline": pipeline,
        }

    def execute(self) -> Iterator[dict[str, Any]]:
        """Run the request in-process against the scan's reader"""
        rows: Iterable[dict] = self.scan
        for stage, arg in self.stages:
            if stage == "filter":
                rows = _filter_rows(rows, arg)
            elif stage == "project":
                rows = _project_rows(rows, arg)
            else:
                keys, aggregates = arg
                rows = group_rows(rows, keys, aggregates)
        yield from rows

    def __repr__(self) -> str:
        return f"ExternalQuery({self.describe()})"


class Implementor:
    """Walks an external subtree bottom-up and collects the request"""

    def __init__(self):
        self.scan = None
        self.stages: list[tuple[str, Any]] = []

    def visit(self, node) -> None:
        node.implement(self)

    def add_stage(self, stage: str, arg: Any) -> None:
        self.stages.append((stage, arg))

    def build(self) -> ExternalQuery:
        if self.scan is None:
            raise ValueError("External subtree has no scan at its leaf")
        return ExternalQuery(self.scan, self.stages)


class ExternalFilter(Filter):
    """Filter evaluated by the external source"""

    convention = Convention.EXTERNAL

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        return super().compute_cost(planner, metadata).multiply_by(metadata.cost_model.PUSHDOWN_DISCOUNT)

    def implement(self, implementor: Implementor) -> None:
        implementor.visit(self.child)
        implementor.add_stage("filter", self.conditions)


class ExternalProject(Project):
    """Projection evaluated by the external source"""

    convention = Convention.EXTERNAL

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        return super().compute_cost(planner, metadata).multiply_by(metadata.cost_model.PUSHDOWN_DISCOUNT)

    def implement(self, implementor: Implementor) -> None:
        implementor.visit(self.child)
        implementor.add_stage("project", self.columns)


class ExternalAggregate(GroupBy):
    """Grouping and aggregation evaluated by the external source"""

    convention = Convention.EXTERNAL

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        return super().compute_cost(planner, metadata).multiply_by(metadata.cost_model.PUSHDOWN_DISCOUNT)

    def implement(self, implementor: Implementor) -> None:
        implementor.visit(self.child)
        implementor.add_stage("group", (self.group_by, self.aggregates))
