"""
Tests for the delimited file reader
"""

import pytest

from tableadapter.errors import FetchError, FileReaderError
from tableadapter.readers.csv_reader import CSVReader


@pytest.fixture
def sample_csv_file(write_file):
    """Create a sample CSV file for testing"""
    return write_file(
        "test_data.csv",
        "name,age,city\n"
        "Alice,30,NYC\n"
        "Bob,25,LA\n"
        "Charlie,35,SF\n",
    )


class TestBasicReading:
    """Test basic CSV reading"""

    def test_headings(self, sample_csv_file):
        assert CSVReader(str(sample_csv_file)).get_headings() == ["name", "age", "city"]

    def test_rows_are_text(self, sample_csv_file):
        rows = list(CSVReader(str(sample_csv_file)))

        assert rows == [["Alice", "30", "NYC"], ["Bob", "25", "LA"], ["Charlie", "35", "SF"]]

    def test_read_lazy(self, sample_csv_file):
        rows = list(CSVReader(str(sample_csv_file)).read_lazy())
        assert rows[1] == {"name": "Bob", "age": "25", "city": "LA"}

    def test_quoted_fields(self, write_file):
        path = write_file("q.csv", 'name,motto\nAlice,"hello, world"\n')
        assert list(CSVReader(str(path))) == [["Alice", "hello, world"]]

    def test_blank_lines_skipped(self, write_file):
        path = write_file("b.csv", "a,b\n\n1,2\n\n3,4\n")
        assert list(CSVReader(str(path))) == [["1", "2"], ["3", "4"]]

    def test_bom_is_stripped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffid,name\n1,x\n".encode("utf-8"))

        assert CSVReader(str(path)).get_headings() == ["id", "name"]

    def test_header_only(self, write_file):
        reader = CSVReader(str(write_file("h.csv", "a,b\n")))

        assert reader.get_headings() == ["a", "b"]
        assert list(reader) == []

    def test_empty_file(self, write_file):
        reader = CSVReader(str(write_file("e.csv", "")))

        assert reader.get_headings() == ["column0"]
        assert list(reader) == []


class TestIrregularRows:
    """Test ragged records"""

    def test_short_rows_padded(self, write_file):
        reader = CSVReader(str(write_file("r.csv", "a,b,c\n1\n")))
        assert list(reader.read_lazy()) == [{"a": "1", "b": None, "c": None}]

    def test_long_rows_truncated_in_dicts(self, write_file):
        reader = CSVReader(str(write_file("r.csv", "a\n1,2,3\n")))

        assert list(reader) == [["1", "2", "3"]]
        assert list(reader.read_lazy()) == [{"a": "1"}]

    def test_repeated_headings_keep_every_cell(self, write_file):
        reader = CSVReader(str(write_file("r.csv", "a,a,b\n1,2,3\n")))

        assert reader.get_headings() == ["a", "a_1", "b"]
        assert list(reader.read_lazy()) == [{"a": "1", "a_1": "2", "b": "3"}]


class TestOptions:
    """Test reader options"""

    def test_headerless(self, write_file):
        reader = CSVReader(str(write_file("n.csv", "1,2\n3,4,5\n")), has_header=False)

        assert reader.get_headings() == ["column0", "column1", "column2"]
        assert list(reader) == [["1", "2"], ["3", "4", "5"]]

    def test_tsv_by_suffix(self, write_file):
        reader = CSVReader(str(write_file("t.tsv", "a\tb\n1\t2\n")))

        assert reader.delimiter == "\t"
        assert reader.get_headings() == ["a", "b"]

    def test_custom_delimiter(self, write_file):
        reader = CSVReader(str(write_file("s.csv", "a;b\n1;2\n")), delimiter=";")
        assert list(reader) == [["1", "2"]]

    def test_undecodable_content(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes("name\nJos\xe9\n".encode("latin-1"))

        with pytest.raises(FileReaderError) as exc_info:
            CSVReader(str(path))

        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    def test_explicit_encoding(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes("name\nJos\xe9\n".encode("latin-1"))

        assert list(CSVReader(str(path), encoding="latin-1")) == [["Jos\xe9"]]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FetchError):
            CSVReader(str(tmp_path / "nope.csv"))
