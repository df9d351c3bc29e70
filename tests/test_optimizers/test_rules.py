"""
Tests for the adapter's rewrite rules
"""

import pytest

from tableadapter.core.expressions import AggregateFunction, Condition
from tableadapter.core.schema import Relation
from tableadapter.core.traits import Convention, PlanContext
from tableadapter.operators.converter import EnumerableConverter
from tableadapter.operators.external import ExternalAggregate, ExternalFilter, ExternalProject
from tableadapter.operators.filter import Filter
from tableadapter.operators.groupby import GroupBy
from tableadapter.operators.project import Project
from tableadapter.operators.scan import ExternalTableScan
from tableadapter.optimizers.rules import (
    RULES,
    ExternalAggregateRule,
    ExternalFilterRule,
    ExternalProjectRule,
    ExternalToEnumerableConverterRule,
)


@pytest.fixture
def scan(emps_csv):
    return Relation("EMPS", str(emps_csv)).scan(PlanContext())


class TestRuleSet:
    """Test the installed rule list"""

    def test_rules(self):
        assert RULES == (
            ExternalFilterRule.INSTANCE,
            ExternalProjectRule.INSTANCE,
            ExternalAggregateRule.INSTANCE,
        )

    def test_instances_are_singletons(self):
        assert ExternalFilterRule.INSTANCE is ExternalFilterRule.INSTANCE
        assert isinstance(ExternalToEnumerableConverterRule.INSTANCE, ExternalToEnumerableConverterRule)

    def test_names(self):
        assert [rule.get_name() for rule in RULES] == [
            "External filter",
            "External project",
            "External aggregate",
        ]


class TestExternalFilterRule:
    """Test filter pushdown"""

    rule = ExternalFilterRule.INSTANCE

    def test_rewrites_filter_on_scan(self, scan):
        node = Filter(scan, [Condition("SALARY", ">", 1000)])

        assert self.rule.matches(node)
        result = self.rule.on_match(node)
        assert isinstance(result, ExternalFilter)
        assert result.child is scan
        assert result.conditions == node.conditions

    def test_declines_unknown_column(self, scan):
        node = Filter(scan, [Condition("BONUS", ">", 0)])

        assert self.rule.matches(node)
        assert self.rule.on_match(node) is None

    def test_ignores_in_memory_input(self, scan):
        node = Filter(Filter(scan, []), [Condition("SALARY", ">", 1000)])
        assert not self.rule.matches(node)

    def test_ignores_already_external(self, scan):
        assert not self.rule.matches(ExternalFilter(scan, []))


class TestExternalProjectRule:
    """Test projection pushdown"""

    rule = ExternalProjectRule.INSTANCE

    def test_star_is_dropped(self, scan):
        assert self.rule.on_match(Project(scan, ["*"])) is scan

    def test_narrows_scan(self, scan):
        result = self.rule.on_match(Project(scan, ["NAME", "SALARY"]))

        assert isinstance(result, ExternalTableScan)
        assert result.derive_row_type().field_names == ["NAME", "SALARY"]

    def test_reorders_narrowed_scan(self, scan):
        result = self.rule.on_match(Project(scan, ["SALARY", "NAME"]))

        assert isinstance(result, ExternalProject)
        assert result.columns == ["SALARY", "NAME"]
        assert isinstance(result.child, ExternalTableScan)
        assert result.child.derive_row_type().field_names == ["NAME", "SALARY"]

    def test_project_over_external_operator(self, scan):
        child = ExternalFilter(scan, [Condition("SALARY", ">", 1000)])
        result = self.rule.on_match(Project(child, ["NAME"]))

        assert isinstance(result, ExternalProject)
        assert result.child is child

    def test_declines_unknown_column(self, scan):
        assert self.rule.on_match(Project(scan, ["BONUS"])) is None


class TestExternalAggregateRule:
    """Test aggregate pushdown"""

    rule = ExternalAggregateRule.INSTANCE

    def test_rewrites_group_by(self, scan):
        node = GroupBy(scan, ["DEPTNO"], [AggregateFunction("COUNT", "*")])

        assert self.rule.matches(node)
        result = self.rule.on_match(node)
        assert isinstance(result, ExternalAggregate)
        assert result.group_by == ["DEPTNO"]

    def test_declines_unknown_aggregate_column(self, scan):
        node = GroupBy(scan, [], [AggregateFunction("SUM", "BONUS")])
        assert self.rule.on_match(node) is None


class TestConverterRule:
    """Test the conversion to ENUMERABLE"""

    rule = ExternalToEnumerableConverterRule.INSTANCE

    def test_conventions(self):
        assert self.rule.in_convention is Convention.EXTERNAL
        assert self.rule.out_convention is Convention.ENUMERABLE

    def test_converts_external_node(self, scan):
        assert self.rule.matches(scan)

        result = self.rule.on_match(scan)
        assert isinstance(result, EnumerableConverter)
        assert result.child is scan

    def test_ignores_generic_node(self, scan):
        assert not self.rule.matches(Filter(scan, []))
