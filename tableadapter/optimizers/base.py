"""
Base classes for planner rules

A rule looks at one plan node and may offer an equivalent replacement.
Rules never mutate the nodes they are given; the planner decides whether a
replacement is worth taking.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from tableadapter.core.traits import Convention

if TYPE_CHECKING:
    from tableadapter.operators.base import Operator


class Rule(ABC):
    """
    Base class for all rewrite rules

    Each rule implements a single transformation. Rules are stateless, so a
    single instance can be shared by every planner.
    """

    @abstractmethod
    def get_name(self) -> str:
        """
        Get the name of this rule

        Returns:
            Human-readable rule name
        """
        pass

    @abstractmethod
    def matches(self, node: Operator) -> bool:
        """
        Check if this rule applies to a node

        Args:
            node: Plan node

        Returns:
            True if on_match() may produce a replacement
        """
        pass

    @abstractmethod
    def on_match(self, node: Operator) -> Optional[Operator]:
        """
        Build a replacement for a matched node

        Args:
            node: Plan node for which matches() returned True

        Returns:
            Equivalent node, or None if the rule declines after all
        """
        pass

    def __repr__(self) -> str:
        return self.get_name()


class ConverterRule(Rule):
    """
    Rule that moves a node from one calling convention to another

    Converter rules are not part of the rewrite search; the planner applies
    them where a node's convention differs from what its consumer executes.
    """

    in_convention: Convention = Convention.NONE
    out_convention: Convention = Convention.ENUMERABLE

    def matches(self, node: Operator) -> bool:
        return node.convention is self.in_convention

    def on_match(self, node: Operator) -> Optional[Operator]:
        return self.convert(node)

    @abstractmethod
    def convert(self, node: Operator) -> Operator:
        """Wrap `node` so that it can be consumed in `out_convention`"""
        pass
