"""
JSON Reader for record files

Supports:
- Array of objects: [{"a": 1}, {"a": 2}]
- Object with records key: {"data": [{"a": 1}, ...], "meta": ...}
- Dotted keys for nested records: "result.items"

The union of record keys, in first-seen order, is the native header.
Values are rendered as text like every other reader's cells.
"""

import json
import logging
from typing import Any, Iterator, List, Optional

from tableadapter.errors import FileReaderError, NoMatchError
from tableadapter.readers.base import TabularReader
from tableadapter.readers.headings import Cell, Row

logger = logging.getLogger(__name__)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


class RecordTable:
    """StructuredTable over a list of JSON objects"""

    def __init__(self, records: List[dict]):
        self.records = records
        self.keys: List[str] = []
        for record in records:
            for key in record:
                if key not in self.keys:
                    self.keys.append(key)

    def head_rows(self) -> Iterator[Row]:
        if self.keys:
            yield [Cell(key, header=True) for key in self.keys]

    def body_rows(self) -> Iterator[Row]:
        for record in self.records:
            yield [Cell(_to_text(record.get(key))) for key in self.keys]


class JSONReader(TabularReader):
    """
    Reader for standard JSON files

    Example:
        reader = JSONReader("EMPS.json")
        reader = JSONReader("response.json", records_key="data.items")
    """

    def __init__(self, source, records_key: Optional[str] = None, encoding: str = "utf-8"):
        """
        Initialize JSON reader

        Args:
            source: Path, URL or SourceLocator
            records_key: Dotted key of the record list. If None, the root
                must be a list, or an object with exactly one list value.
            encoding: File encoding (default: utf-8)
        """
        self.records_key = records_key
        self.encoding = encoding
        super().__init__(source)

    def _parse(self, content: bytes) -> RecordTable:
        try:
            data = json.loads(content.decode(self.encoding))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FileReaderError(f"Invalid JSON file {self.source}: {e}") from e

        records = self._locate_records(data)
        objects = [r for r in records if isinstance(r, dict)]
        if len(objects) != len(records):
            logger.warning(
                "Skipped %d record(s) in %s that are not JSON objects",
                len(records) - len(objects),
                self.source,
            )
        return RecordTable(objects)

    def _locate_records(self, data: Any) -> list:
        if self.records_key:
            current = data
            for part in self.records_key.split("."):
                if not isinstance(current, dict) or part not in current:
                    raise NoMatchError(
                        f"Records key '{self.records_key}' not found in {self.source}"
                    ) from KeyError(part)
                current = current[part]
            if not isinstance(current, list):
                raise NoMatchError(
                    f"Records key '{self.records_key}' in {self.source} is not a list"
                )
            return current

        if isinstance(data, list):
            return data

        if isinstance(data, dict):
            lists = [value for value in data.values() if isinstance(value, list)]
            if len(lists) == 1:
                return lists[0]

        raise NoMatchError(
            f"Could not locate records in {self.source}; specify records_key"
        )
