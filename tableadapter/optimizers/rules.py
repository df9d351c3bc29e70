"""
The adapter's rule set

Generic filter, project and aggregate operators stacked directly on an
external subtree are rewritten into their pushdown variants, so that the
whole stack is handed to the source as one request. A final converter rule
puts an EnumerableConverter on top of each external subtree.

Rules only fire when every column they reference is produced by the
external input; anything else stays in memory.
"""

from __future__ import annotations

from typing import Optional

from tableadapter.core.traits import Convention
from tableadapter.operators.base import Operator
from tableadapter.operators.converter import EnumerableConverter
from tableadapter.operators.external import ExternalAggregate, ExternalFilter, ExternalProject
from tableadapter.operators.filter import Filter
from tableadapter.operators.groupby import GroupBy
from tableadapter.operators.project import Project
from tableadapter.operators.scan import ExternalTableScan
from tableadapter.optimizers.base import ConverterRule, Rule


def _on_external_input(node: Operator, kind: type) -> bool:
    """True for a generic `kind` node whose input is in the EXTERNAL convention"""
    return (
        isinstance(node, kind)
        and node.convention is Convention.NONE
        and node.child is not None
        and node.child.convention is Convention.EXTERNAL
    )


def _produces(node: Operator, columns) -> bool:
    shape = node.row_shape()
    return all(column in shape for column in columns)


class ExternalFilterRule(Rule):
    """
    Push a filter into the external source

    Example:
        Filter(salary > 1000)            ExternalFilter(salary > 1000)
          ExternalTableScan(EMPS)   =>     ExternalTableScan(EMPS)
    """

    INSTANCE: "ExternalFilterRule"

    def get_name(self) -> str:
        return "External filter"

    def matches(self, node: Operator) -> bool:
        return _on_external_input(node, Filter)

    def on_match(self, node: Operator) -> Optional[Operator]:
        if not _produces(node.child, [c.column for c in node.conditions]):
            return None
        return ExternalFilter(node.child, node.conditions)


class ExternalProjectRule(Rule):
    """
    Push a projection into the external source

    A star projection is dropped. A projection sitting directly on a scan
    narrows the scan; if the requested order differs from the native order
    an ExternalProject reorders the narrowed scan's fields.
    """

    INSTANCE: "ExternalProjectRule"

    def get_name(self) -> str:
        return "External project"

    def matches(self, node: Operator) -> bool:
        return _on_external_input(node, Project)

    def on_match(self, node: Operator) -> Optional[Operator]:
        child = node.child
        if node.is_star:
            return child
        if not _produces(child, node.columns):
            return None

        if isinstance(child, ExternalTableScan):
            narrowed = child.narrow(node.columns)
            if narrowed.derive_row_type().field_names == node.columns:
                return narrowed
            return ExternalProject(narrowed, node.columns)

        return ExternalProject(child, node.columns)


class ExternalAggregateRule(Rule):
    """Push grouping and aggregation into the external source"""

    INSTANCE: "ExternalAggregateRule"

    def get_name(self) -> str:
        return "External aggregate"

    def matches(self, node: Operator) -> bool:
        return _on_external_input(node, GroupBy)

    def on_match(self, node: Operator) -> Optional[Operator]:
        columns = list(node.group_by)
        columns.extend(a.column for a in node.aggregates if a.column != "*")
        if not _produces(node.child, columns):
            return None
        return ExternalAggregate(node.child, node.group_by, node.aggregates)


class ExternalToEnumerableConverterRule(ConverterRule):
    """Fallback execution of an external subtree as a row iterator"""

    INSTANCE: "ExternalToEnumerableConverterRule"

    in_convention = Convention.EXTERNAL
    out_convention = Convention.ENUMERABLE

    def get_name(self) -> str:
        return "External to enumerable"

    def convert(self, node: Operator) -> Operator:
        return EnumerableConverter(node)


ExternalFilterRule.INSTANCE = ExternalFilterRule()
ExternalProjectRule.INSTANCE = ExternalProjectRule()
ExternalAggregateRule.INSTANCE = ExternalAggregateRule()
ExternalToEnumerableConverterRule.INSTANCE = ExternalToEnumerableConverterRule()

# Installed by ExternalTableScan.register(), in this order
RULES = (
    ExternalFilterRule.INSTANCE,
    ExternalProjectRule.INSTANCE,
    ExternalAggregateRule.INSTANCE,
)
