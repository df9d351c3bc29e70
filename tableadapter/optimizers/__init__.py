"""
Planning - rules, costs and the rule planner

- Base classes: Rule, ConverterRule
- Adapter rules: ExternalFilterRule, ExternalProjectRule, ExternalAggregateRule,
  ExternalToEnumerableConverterRule
- Costs: Cost, CostModel, TableStatistics, PlanMetadata
- RulePlanner: registers, rewrites and converts a plan

Example:
    ```python
    from tableadapter.optimizers import RulePlanner

    planner = RulePlanner()
    plan = planner.optimize(plan)
    print(planner.get_optimization_summary())
    ```
"""

from tableadapter.optimizers.cost_based import (
    Cost,
    CostModel,
    PlanMetadata,
    TableStatistics,
)
from tableadapter.optimizers.base import ConverterRule, Rule
from tableadapter.optimizers.rules import (
    RULES,
    ExternalAggregateRule,
    ExternalFilterRule,
    ExternalProjectRule,
    ExternalToEnumerableConverterRule,
)
from tableadapter.optimizers.planner import RulePlanner

__all__ = [
    "Rule",
    "ConverterRule",
    "RULES",
    "ExternalFilterRule",
    "ExternalProjectRule",
    "ExternalAggregateRule",
    "ExternalToEnumerableConverterRule",
    "Cost",
    "CostModel",
    "PlanMetadata",
    "TableStatistics",
    "RulePlanner",
]
