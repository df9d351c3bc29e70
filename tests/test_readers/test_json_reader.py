"""
Tests for the JSON record reader
"""

import json
import logging

import pytest

from tableadapter.errors import FileReaderError, NoMatchError
from tableadapter.readers.json_reader import JSONReader


@pytest.fixture
def json_file(write_file):
    def _json(data, name="data.json"):
        return write_file(name, json.dumps(data))

    return _json


class TestJSONReader:
    """Test record layouts"""

    def test_array_of_objects(self, json_file):
        reader = JSONReader(str(json_file([{"name": "Alice", "age": 30}, {"name": "Bob", "age": 25}])))

        assert reader.get_headings() == ["name", "age"]
        assert list(reader) == [["Alice", "30"], ["Bob", "25"]]

    def test_key_union_in_first_seen_order(self, json_file):
        reader = JSONReader(str(json_file([{"a": 1}, {"b": 2, "a": 3}])))

        assert reader.get_headings() == ["a", "b"]
        assert list(reader.read_lazy()) == [{"a": "1", "b": ""}, {"a": "3", "b": "2"}]

    def test_value_rendering(self, json_file):
        reader = JSONReader(str(json_file([{"flag": True, "none": None, "tags": ["x", "y"]}])))
        assert list(reader) == [["true", "", '["x", "y"]']]

    def test_single_list_value_is_found(self, json_file):
        reader = JSONReader(str(json_file({"meta": {"n": 1}, "data": [{"id": 1}]})))
        assert list(reader) == [["1"]]

    def test_records_key(self, json_file):
        data = {"result": {"items": [{"id": 1}, {"id": 2}]}, "other": []}
        reader = JSONReader(str(json_file(data)), records_key="result.items")

        assert list(reader) == [["1"], ["2"]]

    def test_non_object_records_skipped_with_warning(self, json_file, caplog):
        with caplog.at_level(logging.WARNING, logger="tableadapter.readers.json_reader"):
            reader = JSONReader(str(json_file([{"id": 1}, 5, "x", {"id": 2}])))

        assert list(reader) == [["1"], ["2"]]
        assert "Skipped 2 record(s)" in caplog.text

    def test_array_of_arrays_is_reported(self, json_file, caplog):
        with caplog.at_level(logging.WARNING, logger="tableadapter.readers.json_reader"):
            reader = JSONReader(str(json_file([[1, 2], [3, 4]])))

        assert list(reader) == []
        assert "Skipped 2 record(s)" in caplog.text

    def test_object_records_log_nothing(self, json_file, caplog):
        with caplog.at_level(logging.WARNING, logger="tableadapter.readers.json_reader"):
            JSONReader(str(json_file([{"id": 1}])))

        assert caplog.records == []

    def test_empty_array(self, json_file):
        reader = JSONReader(str(json_file([])))

        assert reader.get_headings() == ["column0"]
        assert list(reader) == []


class TestJSONErrors:
    """Test failures"""

    def test_records_key_missing(self, json_file):
        with pytest.raises(NoMatchError) as exc_info:
            JSONReader(str(json_file({"data": []})), records_key="result.items")

        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_records_key_not_a_list(self, json_file):
        with pytest.raises(NoMatchError, match="is not a list"):
            JSONReader(str(json_file({"data": {"a": 1}})), records_key="data")

    def test_ambiguous_records(self, json_file):
        with pytest.raises(NoMatchError, match="specify records_key"):
            JSONReader(str(json_file({"a": [], "b": []})))

    def test_invalid_json(self, write_file):
        with pytest.raises(FileReaderError) as exc_info:
            JSONReader(str(write_file("bad.json", "{not json")))

        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)
