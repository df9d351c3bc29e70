"""
Planner-facing traits

A plan node advertises its calling convention (which engine can execute it)
and, for the adapter's scan, a small set of capabilities the planner talks to:

- Scannable: a leaf that reads one relation and derives its row type
- CostEstimable: can estimate its own cost
- RuleRegistrant: installs rules into the planner that is about to use it
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable


class Convention(Enum):
    """Calling convention of a plan node"""

    NONE = "NONE"  # generic logical operators, executed in memory
    ENUMERABLE = "ENUMERABLE"  # the engine's generic row-iterator execution
    EXTERNAL = "EXTERNAL"  # executed by the external-source adapter

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PlanContext:
    """
    Cluster/trait context a planner hands to the nodes it builds

    Only `convention` is read by the adapter; `traits` is passed through
    untouched.
    """

    planner: Any = None
    convention: Convention = Convention.EXTERNAL
    traits: Mapping[str, Any] = field(default_factory=dict)


@runtime_checkable
class Scannable(Protocol):
    def derive_row_type(self) -> Any: ...

    def copy(self, traits: Any = None, inputs: Sequence[Any] | None = None) -> Any: ...


@runtime_checkable
class CostEstimable(Protocol):
    def compute_cost(self, planner: Any, metadata: Any) -> Any: ...


@runtime_checkable
class RuleRegistrant(Protocol):
    def register(self, planner: Any) -> None: ...
