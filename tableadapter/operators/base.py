"""
Base operator class for Volcano-style plans

The Volcano model uses pull-based execution where each operator
pulls data from its child operator(s) on demand. The same objects are the
nodes the planner rewrites, so each operator also knows its calling
convention, its row shape and its own cost.
"""

from __future__ import annotations

import copy as _copy
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, Optional

from tableadapter.core.traits import Convention
from tableadapter.core.types import RowShape

if TYPE_CHECKING:
    from tableadapter.optimizers.cost_based import Cost, PlanMetadata


class Operator:
    """
    Base class for all plan operators

    Operators form a tree where:
    - Leaf operators (the external scan) read from data sources
    - Internal operators (filter, project, aggregate) transform data
    - Root operator is pulled by the caller to get results
    """

    convention = Convention.NONE

    def __init__(self, child: Optional["Operator"] = None):
        """
        Initialize operator

        Args:
            child: Child operator to pull data from (None for leaf operators)
        """
        self.child = child

    @property
    def inputs(self) -> list["Operator"]:
        return [self.child] if self.child is not None else []

    def copy(self, traits: Any = None, inputs: Optional[Sequence["Operator"]] = None) -> "Operator":
        """
        Copy this operator onto new inputs

        Traits are fixed per operator class and are ignored here.
        """
        clone = _copy.copy(self)
        if inputs is not None:
            if len(inputs) != len(self.inputs):
                raise ValueError(
                    f"{self.__class__.__name__} takes {len(self.inputs)} input(s), got {len(inputs)}"
                )
            clone.child = inputs[0] if inputs else None
        return clone

    def row_shape(self) -> RowShape:
        """Shape of the rows this operator produces"""
        raise NotImplementedError(f"{self.__class__.__name__} must implement row_shape()")

    def estimate_row_count(self, metadata: PlanMetadata) -> float:
        """Estimated rows produced; defaults to the input's estimate"""
        return metadata.row_count(self.child)

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        """Cost of this operator alone (inputs excluded)"""
        raise NotImplementedError(f"{self.__class__.__name__} must implement compute_cost()")

    def __iter__(self) -> Iterator[dict[str, Any]]:
        """
        Execute operator and yield results

        Yields:
            Rows as dictionaries
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement __iter__()")

    def explain(self, indent: int = 0) -> list[str]:
        """Generate plan explanation, one line per operator"""
        lines = [" " * indent + f"{self!r} [{self.convention}]"]
        for child in self.inputs:
            lines.extend(child.explain(indent + 2))
        return lines

    def __repr__(self) -> str:
        """String representation for debugging"""
        return f"{self.__class__.__name__}()"
