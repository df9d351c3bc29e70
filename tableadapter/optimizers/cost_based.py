"""
Cost-Based Optimization Framework

Provides the cost side of planning:
- Cost values (rows, cpu, io) that can be scaled and added
- CostModel: tunable per-row constants and the generic leaf-cost estimator
- TableStatistics: row count estimates for external relations
- PlanMetadata: row count, selectivity and cumulative cost of plan nodes

Costs are in abstract units. Lower is better.
The goal is to compare different plans, not to predict absolute runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Optional

from tableadapter.core.expressions import Condition

if TYPE_CHECKING:
    from tableadapter.operators.base import Operator


@dataclass(frozen=True)
class Cost:
    """
    Estimated cost of a plan node

    Attributes:
        rows: Estimated rows produced
        cpu: CPU units
        io: I/O units
    """

    rows: float
    cpu: float
    io: float = 0.0

    def multiply_by(self, factor: float) -> "Cost":
        return Cost(self.rows * factor, self.cpu * factor, self.io * factor)

    def plus(self, other: "Cost") -> "Cost":
        return Cost(self.rows + other.rows, self.cpu + other.cpu, self.io + other.io)

    def _key(self) -> tuple:
        return (self.rows, self.cpu, self.io)

    def __le__(self, other: "Cost") -> bool:
        return self._key() <= other._key()

    def __lt__(self, other: "Cost") -> bool:
        return self._key() < other._key()

    def __repr__(self) -> str:
        return f"{{{self.rows:g} rows, {self.cpu:g} cpu, {self.io:g} io}}"


ZERO_COST = Cost(0.0, 0.0, 0.0)


@dataclass
class TableStatistics:
    """
    Statistics about an external relation

    Attributes:
        row_count: Estimated number of rows
    """

    row_count: int = 0


class CostModel:
    """
    Cost model for estimating plan node costs

    Constants are tunable: subclass and hand the subclass to the planner.
    """

    COST_PER_ROW_SCAN = 1.0  # Cost to read one row
    COST_PER_ROW_FILTER = 0.1  # Cost to evaluate filter on one row
    COST_PER_ROW_PROJECT = 0.05  # Cost to project one row
    COST_PER_ROW_HASH = 1.5  # Cost to hash one row (for groups)

    # Row count assumed for relations without statistics
    DEFAULT_ROW_COUNT = 100

    # External scans are assumed an order of magnitude cheaper than generic
    # relations; the scan cost is further scaled by the projected field ratio.
    SCAN_DISCOUNT = 0.1

    # Operators executed by the external source cost this fraction of their
    # in-memory equivalents.
    PUSHDOWN_DISCOUNT = 0.1

    @classmethod
    def leaf_cost(cls, row_count: float) -> Cost:
        """
        Generic cost of reading a leaf relation

        Args:
            row_count: Estimated rows in the relation

        Returns:
            Cost
        """
        return Cost(row_count, row_count * cls.COST_PER_ROW_SCAN + 1, 0.0)

    @classmethod
    def filter_cost(cls, input_rows: float, output_rows: float) -> Cost:
        return Cost(output_rows, input_rows * cls.COST_PER_ROW_FILTER, 0.0)

    @classmethod
    def project_cost(cls, rows: float) -> Cost:
        return Cost(rows, rows * cls.COST_PER_ROW_PROJECT, 0.0)

    @classmethod
    def aggregate_cost(cls, input_rows: float, output_rows: float) -> Cost:
        return Cost(output_rows, input_rows * cls.COST_PER_ROW_HASH, 0.0)

    @classmethod
    def estimate_selectivity(cls, condition: Condition) -> float:
        """
        Estimate selectivity of a filter condition

        Args:
            condition: Filter condition

        Returns:
            Estimated selectivity (0.0-1.0)

        Note:
            These are rough heuristics. Real databases use histograms.
        """
        op = condition.operator

        if op == "=":
            return 0.1
        elif op == "!=":
            return 0.9
        else:
            # Range: assume half the rows
            return 0.5


class PlanMetadata:
    """
    Metadata queries over plan nodes

    Each node estimates its own row count through this object, so the
    cost model in use is consistent across the whole plan.
    """

    def __init__(self, cost_model: type[CostModel] = CostModel):
        self.cost_model = cost_model

    def row_count(self, node: "Operator") -> float:
        return node.estimate_row_count(self)

    def selectivity(self, conditions: Iterable[Condition]) -> float:
        result = 1.0
        for condition in conditions:
            result *= self.cost_model.estimate_selectivity(condition)
        return result

    def cumulative_cost(self, node: "Operator", planner: Optional[Any] = None) -> Cost:
        """Cost of a node plus the cost of everything beneath it"""
        total = node.compute_cost(planner, self)
        for child in node.inputs:
            total = total.plus(self.cumulative_cost(child, planner))
        return total
