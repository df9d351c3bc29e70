"""
tableadapter - external tables for a relational query planner

Exposes HTML pages, delimited files and JSON record files as relations: a
cost-aware scan the planner can rewrite into pushdown forms, and lazy,
fault-tolerant readers that turn the fetched content into rows.
"""

__version__ = "0.1.0"

# Main API
from tableadapter.core.factory import create_reader
from tableadapter.core.schema import FileSchema, Relation
from tableadapter.core.traits import Convention, PlanContext
from tableadapter.optimizers.planner import RulePlanner

__all__ = [
    "__version__",
    "create_reader",
    "Relation",
    "FileSchema",
    "Convention",
    "PlanContext",
    "RulePlanner",
]
