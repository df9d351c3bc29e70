"""
External table scan - the adapter's leaf operator

Represents "read relation R from external source S" in a plan. It carries
an optional projection, advertises a cost that favours narrow projections,
and installs the adapter's pushdown rules into the planner that uses it.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, Optional

from tableadapter.core.traits import Convention, PlanContext
from tableadapter.core.types import RowShape
from tableadapter.errors import PlanContractError
from tableadapter.operators.base import Operator

if TYPE_CHECKING:
    from tableadapter.core.schema import Relation
    from tableadapter.optimizers.cost_based import Cost, PlanMetadata


class ExternalTableScan(Operator):
    """
    Scan of an external relation

    A scan is a leaf and immutable after construction, so one instance can be
    shared read-only between planning threads. Its traits cannot be rewritten:
    copy() returns the node itself.

    Example:
        context = PlanContext(planner)
        scan = ExternalTableScan.create(context, ("FILES", "DEPTS"), depts)
        for row in scan:
            print(row)
    """

    convention = Convention.EXTERNAL

    def __init__(
        self,
        context: PlanContext,
        table: Sequence[str],
        relation: Relation,
        projected_shape: Optional[RowShape] = None,
    ):
        """
        Initialize scan

        Args:
            context: Planner-supplied context; must be in the EXTERNAL convention
            table: Qualified table name
            relation: Relation to read
            projected_shape: Fields to produce; None to produce the native row

        Raises:
            PlanContractError: If the context convention is wrong, or the
                projection is not an ordered subset of the native shape
            FileReaderError: If the native shape has to be read from the
                source and the source cannot be read
        """
        if context.convention is not Convention.EXTERNAL:
            raise PlanContractError(
                f"{self.__class__.__name__} requires convention {Convention.EXTERNAL}, "
                f"got {context.convention}"
            )
        # Resolved here so that row type and cost derivation never touch the source
        native = relation.native_shape
        if projected_shape is not None and not projected_shape.is_projection_of(native):
            raise PlanContractError(
                f"Projection {projected_shape.field_names} is not an ordered subset of "
                f"{native.field_names}"
            )
        super().__init__(child=None)
        self.context = context
        self.table = tuple(table)
        self.relation = relation
        self.projected_shape = projected_shape

    @classmethod
    def create(
        cls,
        context: PlanContext,
        table: Sequence[str],
        relation: Relation,
        projected_shape: Optional[RowShape] = None,
    ) -> "ExternalTableScan":
        return cls(context, table, relation, projected_shape)

    def derive_row_type(self) -> RowShape:
        """Projected shape if set, else the relation's native shape"""
        if self.projected_shape is not None:
            return self.projected_shape
        return self.relation.native_shape

    def row_shape(self) -> RowShape:
        return self.derive_row_type()

    def estimate_row_count(self, metadata: PlanMetadata) -> float:
        return float(self.relation.statistics.row_count)

    def compute_cost(self, planner: Any, metadata: PlanMetadata) -> Cost:
        """
        Leaf cost scaled by the scan discount and the projected field ratio

        Scans with a small project list are cheaper.
        """
        cost_model = metadata.cost_model
        ratio = 1.0
        if self.projected_shape is not None:
            native = self.relation.native_shape.field_count
            if native:
                ratio = self.projected_shape.field_count / native
        base = cost_model.leaf_cost(metadata.row_count(self))
        return base.multiply_by(cost_model.SCAN_DISCOUNT * ratio)

    def register(self, planner) -> None:
        """Install the adapter's rules, plus the fallback conversion to ENUMERABLE"""
        from tableadapter.optimizers.rules import RULES, ExternalToEnumerableConverterRule

        planner.add_rule(ExternalToEnumerableConverterRule.INSTANCE)
        for rule in RULES:
            planner.add_rule(rule)

    def copy(self, traits: Any = None, inputs: Optional[Sequence[Operator]] = None) -> "ExternalTableScan":
        if inputs:
            raise PlanContractError(f"{self.__class__.__name__} is a leaf and takes no inputs")
        return self

    def narrow(self, columns: Sequence[str]) -> "ExternalTableScan":
        """
        Scan producing only `columns`

        Fields keep their native order whatever order `columns` lists them in.
        """
        native = self.relation.native_shape
        wanted = set(columns)
        ordered = [f.name for f in native if f.name in wanted]
        return self.create(self.context, self.table, self.relation, native.project(ordered))

    def implement(self, implementor) -> None:
        implementor.scan = self

    def __iter__(self) -> Iterator[dict[str, Any]]:
        """
        Stream rows from a freshly opened reader

        Cells are matched to fields by position; a missing cell yields None.
        """
        native = self.relation.native_shape
        fields = [(f.name, native.field(f.name).index) for f in self.derive_row_type()]
        for row in self.relation.open_reader():
            yield {name: (row[i] if i < len(row) else None) for name, i in fields}

    def __repr__(self) -> str:
        table = ".".join(self.table)
        if self.projected_shape is None:
            return f"{self.__class__.__name__}({table})"
        return f"{self.__class__.__name__}({table}, fields={self.projected_shape.field_names})"
