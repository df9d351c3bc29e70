"""
Tests for generic operators, pushdown variants and the enumerable converter
"""

import pytest

from tableadapter.core.expressions import AggregateFunction, Condition
from tableadapter.core.schema import Relation
from tableadapter.core.traits import Convention, PlanContext
from tableadapter.core.types import DataType
from tableadapter.operators.converter import EnumerableConverter
from tableadapter.operators.external import (
    ExternalAggregate,
    ExternalFilter,
    ExternalProject,
    Implementor,
)
from tableadapter.operators.filter import Filter
from tableadapter.operators.groupby import GroupBy
from tableadapter.operators.project import Project
from tableadapter.optimizers.cost_based import PlanMetadata


@pytest.fixture
def scan(emps_csv):
    return Relation("EMPS", str(emps_csv)).scan(PlanContext())


class TestFilter:
    """Test Filter operator"""

    def test_filter(self, scan):
        rows = list(Filter(scan, [Condition("SALARY", ">", 1000)]))
        assert [r["NAME"] for r in rows] == ["Eric", "Wilma"]

    def test_conditions_are_anded(self, scan):
        conditions = [Condition("DEPTNO", "=", 20), Condition("SALARY", "<", 2500)]
        assert [r["NAME"] for r in Filter(scan, conditions)] == ["Eric"]

    def test_row_shape_is_unchanged(self, scan):
        assert Filter(scan, []).row_shape() == scan.row_shape()

    def test_row_count_uses_selectivity(self, scan):
        metadata = PlanMetadata()

        assert Filter(scan, [Condition("NAME", "=", "Fred")]).estimate_row_count(metadata) == pytest.approx(10)
        assert Filter(scan, [Condition("SALARY", ">", 0)]).estimate_row_count(metadata) == pytest.approx(50)

    def test_repr(self, scan):
        assert repr(Filter(scan, [Condition("SALARY", ">", 1000)])) == "Filter(SALARY > 1000)"


class TestProject:
    """Test Project operator"""

    def test_project(self, scan):
        rows = list(Project(scan, ["NAME", "EMPNO"]))

        assert rows[0] == {"NAME": "Fred", "EMPNO": "100"}
        assert list(rows[0]) == ["NAME", "EMPNO"]

    def test_star(self, scan):
        project = Project(scan, ["*"])

        assert project.is_star
        assert project.row_shape() == scan.row_shape()
        assert list(project) == list(scan)

    def test_row_shape(self, scan):
        assert Project(scan, ["SALARY", "NAME"]).row_shape().field_names == ["SALARY", "NAME"]

    def test_unknown_column(self, scan):
        with pytest.raises(KeyError):
            Project(scan, ["BONUS"]).row_shape()


class TestGroupBy:
    """Test GroupBy operator"""

    def test_group_by(self, scan):
        aggregates = [AggregateFunction("COUNT", "*"), AggregateFunction("SUM", "SALARY")]
        rows = list(GroupBy(scan, ["DEPTNO"], aggregates))

        assert rows == [
            {"DEPTNO": "10", "count_star": 1, "sum_SALARY": 1000},
            {"DEPTNO": "20", "count_star": 2, "sum_SALARY": 5000},
            {"DEPTNO": "40", "count_star": 1, "sum_SALARY": 500},
        ]

    def test_row_shape(self, scan):
        shape = GroupBy(scan, ["DEPTNO"], [AggregateFunction("COUNT", "*", "n")]).row_shape()

        assert shape.field_names == ["DEPTNO", "n"]
        assert shape.field("n").type == DataType.INTEGER

    def test_row_count(self, scan):
        metadata = PlanMetadata()

        assert GroupBy(scan, [], [AggregateFunction("COUNT", "*")]).estimate_row_count(metadata) == 1
        assert GroupBy(scan, ["DEPTNO"], []).estimate_row_count(metadata) == pytest.approx(10)


class TestOperatorCopy:
    """Test copying onto new inputs"""

    def test_copy_replaces_child(self, scan, emps_csv):
        other = Relation("EMPS2", str(emps_csv)).scan(PlanContext())
        original = Filter(scan, [Condition("SALARY", ">", 1000)])
        copied = original.copy(inputs=[other])

        assert copied is not original
        assert copied.child is other
        assert original.child is scan
        assert copied.conditions == original.conditions

    def test_copy_checks_input_count(self, scan):
        with pytest.raises(ValueError, match="takes 1 input"):
            Filter(scan, []).copy(inputs=[scan, scan])


class TestPushdownOperators:
    """Test the EXTERNAL operators and the request they build"""

    def test_conventions(self, scan):
        assert ExternalFilter(scan, []).convention is Convention.EXTERNAL
        assert ExternalProject(scan, ["NAME"]).convention is Convention.EXTERNAL
        assert ExternalAggregate(scan, [], []).convention is Convention.EXTERNAL
        assert EnumerableConverter(scan).convention is Convention.ENUMERABLE

    def test_pushdown_is_cheaper(self, scan):
        metadata = PlanMetadata()
        condition = [Condition("SALARY", ">", 1000)]

        assert ExternalFilter(scan, condition).compute_cost(None, metadata) < Filter(scan, condition).compute_cost(
            None, metadata
        )
        assert ExternalProject(scan, ["NAME"]).compute_cost(None, metadata) < Project(scan, ["NAME"]).compute_cost(
            None, metadata
        )

    def test_implement(self, scan):
        node = ExternalProject(ExternalFilter(scan, [Condition("SALARY", ">", 1000)]), ["NAME"])
        query = EnumerableConverter(node).implement()

        assert query.scan is scan
        assert [stage for stage, _ in query.stages] == ["filter", "project"]

    def test_describe(self, scan, emps_csv):
        node = ExternalAggregate(
            ExternalFilter(scan, [Condition("DEPTNO", "=", 20)]),
            ["DEPTNO"],
            [AggregateFunction("AVG", "SALARY")],
        )
        description = EnumerableConverter(node).implement().describe()

        assert description == {
            "table": "EMPS",
            "source": str(emps_csv),
            "selector": None,
            "index": None,
            "fields": ["EMPNO", "NAME", "DEPTNO", "SALARY"],
            "pipeline": [
                {"$filter": [{"column": "DEPTNO", "op": "=", "value": 20}]},
                {
                    "$group": {
                        "keys": ["DEPTNO"],
                        "aggregates": [{"fn": "AVG", "column": "SALARY", "as": "avg_SALARY"}],
                    }
                },
            ],
        }

    def test_converter_executes_request(self, scan):
        node = ExternalProject(ExternalFilter(scan, [Condition("SALARY", ">", 1000)]), ["NAME"])
        assert list(EnumerableConverter(node)) == [{"NAME": "Eric"}, {"NAME": "Wilma"}]

    def test_converter_matches_in_memory_execution(self, scan):
        condition = [Condition("DEPTNO", "!=", 10)]
        aggregates = [AggregateFunction("MAX", "SALARY")]

        in_memory = list(GroupBy(Filter(scan, condition), ["DEPTNO"], aggregates))
        pushed = list(EnumerableConverter(ExternalAggregate(ExternalFilter(scan, condition), ["DEPTNO"], aggregates)))

        assert pushed == in_memory

    def test_converter_row_shape(self, scan):
        assert EnumerableConverter(ExternalProject(scan, ["NAME"])).row_shape().field_names == ["NAME"]

    def test_implementor_needs_a_scan(self):
        with pytest.raises(ValueError, match="no scan"):
            Implementor().build()

    def test_explain(self, scan):
        plan = EnumerableConverter(ExternalFilter(scan, [Condition("SALARY", ">", 1000)]))

        assert plan.explain() == [
            "EnumerableConverter() [ENUMERABLE]",
            "  ExternalFilter(SALARY > 1000) [EXTERNAL]",
            "    ExternalTableScan(EMPS) [EXTERNAL]",
        ]
