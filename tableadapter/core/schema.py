"""
Relations and the file schema factory

A Relation binds a logical table name to one external source (plus an
optional table locator). FileSchema resolves a directory of files, or an
explicit table list, into relations.
"""

from __future__ import annotations

import logging
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from tableadapter.core.factory import SUFFIX_FORMATS, create_reader
from tableadapter.core.fragment_parser import parse_source_fragment
from tableadapter.core.sources import SourceLocator, resolve_source
from tableadapter.core.types import RowShape
from tableadapter.errors import FetchError
from tableadapter.optimizers.cost_based import CostModel, TableStatistics
from tableadapter.readers.base import TabularReader

logger = logging.getLogger(__name__)


class Relation:
    """
    A named external table

    The source address is resolved when the relation is created; content is
    only fetched when a reader is opened. The native row shape is taken from
    declared columns when given, otherwise from the reader's headings the
    first time it is needed, and is then fixed for the relation's lifetime.

    Example:
        cities = Relation("CITIES", "https://example.org/cities",
                          selector="table.wikitable", index=0)
        reader = cities.open_reader()
    """

    def __init__(
        self,
        name: str,
        source,
        selector: Optional[str] = None,
        index: Optional[int] = None,
        format: Optional[str] = None,
        columns: Optional[Sequence[str]] = None,
        row_count: Optional[int] = None,
        **reader_options: Any,
    ):
        """
        Initialize relation

        Args:
            name: Logical table name
            source: Path or URL (fragment syntax allowed) or SourceLocator
            selector: Table locator for multi-table documents
            index: Occurrence index of the table
            format: Reader format; detected when omitted
            columns: Declared column names; read from the source when omitted
            row_count: Row count estimate for the cost model
            **reader_options: Passed to the reader (delimiter, records_key, ...)

        Raises:
            SourceResolutionError: If the address is malformed
        """
        if isinstance(source, str):
            source, format_hint, index_hint = parse_source_fragment(source)
            format = format or format_hint
            index = index if index is not None else index_hint

        self._name = name
        self._source = resolve_source(source)
        self._selector = selector
        self._index = index
        self._format = format
        self._declared = RowShape.of(columns) if columns else None
        self._row_count = row_count
        self._reader_options = dict(reader_options)

    @property
    def name(self) -> str:
        return self._name

    @property
    def source(self) -> SourceLocator:
        return self._source

    @property
    def selector(self) -> Optional[str]:
        return self._selector

    @property
    def index(self) -> Optional[int]:
        return self._index

    @property
    def format(self) -> Optional[str]:
        return self._format

    def open_reader(self) -> TabularReader:
        """
        Fetch the source and return a reader positioned on this relation's table

        Each call fetches again, so a scan executed twice sees fresh content.
        """
        return create_reader(
            self._source, self._selector, self._index, self._format, **self._reader_options
        )

    @cached_property
    def native_shape(self) -> RowShape:
        """Row shape of the whole relation"""
        if self._declared is not None:
            return self._declared
        shape = self.open_reader().get_schema()
        logger.debug("Resolved shape of %s: %s", self._name, shape.field_names)
        return shape

    @property
    def statistics(self) -> TableStatistics:
        row_count = self._row_count if self._row_count is not None else CostModel.DEFAULT_ROW_COUNT
        return TableStatistics(row_count=row_count)

    def scan(self, context, projection: Optional[Sequence[str]] = None, table: Optional[Sequence[str]] = None):
        """
        Build a scan node over this relation

        Args:
            context: PlanContext supplied by the planner
            projection: Column names to keep, or None for all columns
            table: Qualified table name; defaults to (name,)

        Returns:
            ExternalTableScan
        """
        from tableadapter.operators.scan import ExternalTableScan

        projected = self.native_shape.project(projection) if projection is not None else None
        return ExternalTableScan.create(context, table or (self._name,), self, projected)

    def __repr__(self) -> str:
        locator = f", selector={self._selector!r}" if self._selector else ""
        return f"Relation({self._name}, {self._source}{locator})"


class FileSchema:
    """
    Schema whose tables are external files or pages

    Example:
        schema = FileSchema("SALES", directory="data/sales")
        schema.table_names()  # ['DEPTS', 'EMPS']

        schema = FileSchema("WEB", tables=[
            {"name": "STATES", "url": "https://example.org/states",
             "selector": "table.wikitable", "index": 0},
        ])
    """

    def __init__(
        self,
        name: str = "FILES",
        directory=None,
        tables: Optional[Iterable[Mapping[str, Any]]] = None,
    ):
        """
        Initialize schema

        Args:
            name: Schema name
            directory: Directory scanned for .csv, .tsv, .json and .html files
            tables: Explicit table definitions with keys name, url and
                optionally selector, index, format, columns, row_count

        Raises:
            FetchError: If the directory cannot be listed
            SourceResolutionError: If a table address is malformed
        """
        self.name = name
        self._relations: Dict[str, Relation] = {}

        if directory is not None:
            self._add_directory(Path(directory))

        for definition in tables or ():
            options = dict(definition)
            table_name = options.pop("name")
            url = options.pop("url")
            self._relations[table_name] = Relation(table_name, url, **options)

    def _add_directory(self, directory: Path) -> None:
        try:
            paths = sorted(directory.iterdir())
        except OSError as e:
            raise FetchError(f"Failed to list directory {directory}: {e}") from e

        for path in paths:
            if path.is_file() and path.suffix.lower() in SUFFIX_FORMATS:
                self._relations[path.stem] = Relation(path.stem, path)

        logger.debug("Schema %s found %d table(s) in %s", self.name, len(self._relations), directory)

    @property
    def relations(self) -> Dict[str, Relation]:
        return dict(self._relations)

    def table_names(self) -> List[str]:
        return list(self._relations)

    def __contains__(self, name: str) -> bool:
        return name in self._relations

    def get_table(self, name: str) -> Relation:
        """
        Look up a relation by name

        Raises:
            KeyError: If the schema has no such table
        """
        if name not in self._relations:
            available = ", ".join(self._relations)
            raise KeyError(f"Table '{name}' not found in schema {self.name}. Available: {available}")
        return self._relations[name]

    def scan(self, name: str, context, projection: Optional[Sequence[str]] = None):
        """Build a scan node for one of the schema's tables"""
        return self.get_table(name).scan(context, projection, table=(self.name, name))
