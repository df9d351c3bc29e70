"""
Rule planner - drives registration, rewriting and conversion

A small planner with no search space and no join enumeration. It lets the
adapter's scan take part in planning the way it would inside a host
engine:

1. Every node that installs rules (RuleRegistrant) is asked to register once
2. Rewrite rules are applied bottom-up until the plan stops changing; a
   rewrite is only kept when it does not increase the plan's cost
3. Converter rules wrap each external subtree so that it can be pulled by
   the generic row-iterator engine
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, List, Optional

from tableadapter.core.traits import Convention, RuleRegistrant
from tableadapter.optimizers.base import ConverterRule, Rule
from tableadapter.optimizers.cost_based import Cost, CostModel, PlanMetadata

if TYPE_CHECKING:
    from tableadapter.operators.base import Operator

logger = logging.getLogger(__name__)


def walk(node: Operator) -> Iterator[Operator]:
    """Yield `node` and everything beneath it, parents first"""
    yield node
    for child in node.inputs:
        yield from walk(child)


class RulePlanner:
    """
    Planner owning a rule set

    The rule set is planner-owned mutable state. Registration is expected to
    happen from a single thread, before optimize() starts rewriting.

    Example:
        ```python
        planner = RulePlanner()
        context = PlanContext(planner)
        plan = Filter(schema.scan("EMPS", context), [Condition("DEPTNO", "=", 10)])
        plan = planner.optimize(plan)
        print(planner.get_optimization_summary())
        for row in plan:
            print(row)
        ```
    """

    def __init__(self, cost_model: type[CostModel] = CostModel, max_passes: int = 10):
        """
        Initialize planner

        Args:
            cost_model: CostModel class (or subclass with tuned constants)
            max_passes: Upper bound on bottom-up rewrite passes
        """
        self.cost_model = cost_model
        self.metadata = PlanMetadata(cost_model)
        self.max_passes = max_passes
        self._rules: List[Rule] = []
        self._registered: set[int] = set()
        self.optimizations_applied: List[str] = []

    def add_rule(self, rule: Rule) -> bool:
        """
        Add a rule unless it is already installed

        Returns:
            True if the rule was added
        """
        if rule in self._rules:
            return False
        self._rules.append(rule)
        logger.debug("Installed rule %s", rule.get_name())
        return True

    def get_rules(self) -> List[Rule]:
        return list(self._rules)

    def register(self, root: Operator) -> None:
        """Ask every rule-installing node in the tree to register, once per node"""
        for node in walk(root):
            if id(node) in self._registered or not isinstance(node, RuleRegistrant):
                continue
            self._registered.add(id(node))
            node.register(self)

    def cost(self, node: Operator) -> Cost:
        """Cumulative cost of a plan"""
        return self.metadata.cumulative_cost(node, self)

    def optimize(self, root: Operator) -> Operator:
        """
        Plan a tree of operators

        Args:
            root: Root of the logical plan

        Returns:
            Root of the rewritten plan, ready to be iterated
        """
        self.optimizations_applied = []
        self.register(root)

        plan = root
        for _ in range(self.max_passes):
            rewritten = self._rewrite(plan)
            if rewritten is plan:
                break
            plan = rewritten

        plan = self._convert(plan, parent=None)
        logger.debug("Final plan:\n%s", "\n".join(plan.explain()))
        return plan

    def _rewrite(self, node: Operator) -> Operator:
        """One bottom-up pass; returns `node` itself when nothing changed"""
        inputs = [self._rewrite(child) for child in node.inputs]
        if any(new is not old for new, old in zip(inputs, node.inputs)):
            node = node.copy(inputs=inputs)

        for rule in self._rules:
            if isinstance(rule, ConverterRule) or not rule.matches(node):
                continue
            candidate = rule.on_match(node)
            if candidate is None or candidate is node:
                continue

            before, after = self.cost(node), self.cost(candidate)
            if after <= before:
                logger.debug("%s: %r -> %r (cost %r -> %r)", rule.get_name(), node, candidate, before, after)
                self.optimizations_applied.append(f"{rule.get_name()}: {node!r}")
                return candidate
            logger.debug("%s rejected for %r: cost %r > %r", rule.get_name(), node, after, before)

        return node

    def _convert(self, node: Operator, parent: Optional[Operator]) -> Operator:
        """Insert converters where an external node feeds a non-external consumer"""
        inputs = [self._convert(child, node) for child in node.inputs]
        if any(new is not old for new, old in zip(inputs, node.inputs)):
            node = node.copy(inputs=inputs)

        if parent is not None and parent.convention is Convention.EXTERNAL:
            return node

        for rule in self._rules:
            if isinstance(rule, ConverterRule) and rule.matches(node):
                return rule.convert(node)
        return node

    def get_optimization_summary(self) -> str:
        """
        Get summary of rewrites applied by the last optimize() call

        Returns:
            Human-readable summary
        """
        if not self.optimizations_applied:
            return "No optimizations applied"

        summary = "Optimizations applied:\n"
        for description in self.optimizations_applied:
            summary += f"  - {description}\n"

        return summary.strip()
