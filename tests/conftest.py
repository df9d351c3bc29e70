"""
Pytest configuration and shared fixtures
"""

from unittest.mock import Mock

import pytest

# Well-formed table: explicit header and body sections
TABLE_OK = """<html><body>
<table id="ok">
  <thead><tr><th>H0</th><th>H1</th><th>H2</th></tr></thead>
  <tbody>
    <tr><td>a0</td><td>a1</td><td>a2</td></tr>
    <tr><td>b0</td><td>b1</td><td>b2</td></tr>
  </tbody>
</table>
</body></html>"""

# No <thead>/<tbody>; header-style cells in the first row
TABLE_NO_THEAD_TBODY = """<html><body>
<table>
  <tr><th>H0</th><th>H1</th><th>H2</th></tr>
  <tr><td>a0</td><td>a1</td><td>a2</td></tr>
  <tr><td>b0</td><td>b1</td><td>b2</td></tr>
</table>
</body></html>"""

# Header markers stripped; the first row still carries the labels
TABLE_NO_TH = """<html><body>
<table>
  <tr><td>H0</td><td>H1</td><td>H2</td></tr>
  <tr><td>a0</td><td>a1</td><td>a2</td></tr>
</table>
</body></html>"""

# Only numbers, rows of different widths
TABLE_HEADERLESS = """<html><body>
<table>
  <tr><td>1</td><td>2</td></tr>
  <tr><td>3</td><td>4</td><td>5</td></tr>
  <tr><td>6</td></tr>
</table>
</body></html>"""

MULTI_TABLE = """<html><body>
<div id="first">
  <table class="data"><tr><th>A</th></tr><tr><td>1</td></tr></table>
</div>
<table class="data"><tr><th>B</th></tr><tr><td>2</td></tr><tr><td>3</td></tr></table>
<table class="other"><tr><th>C</th><th>D</th></tr><tr><td>4</td><td>5</td></tr></table>
</body></html>"""

DEPTS_CSV = """DEPTNO,NAME
10,Sales
20,Marketing
30,Accounts
"""

EMPS_CSV = """EMPNO,NAME,DEPTNO,SALARY
100,Fred,10,1000
110,Eric,20,2000
120,Wilma,20,3000
130,Alice,40,500
"""


@pytest.fixture
def write_file(tmp_path):
    """Factory writing `content` to tmp_path/name and returning the path"""

    def _write(name, content):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def table_ok(write_file):
    return write_file("table_ok.html", TABLE_OK)


@pytest.fixture
def table_no_thead_tbody(write_file):
    return write_file("table_no_thead_tbody.html", TABLE_NO_THEAD_TBODY)


@pytest.fixture
def table_no_th(write_file):
    return write_file("table_no_th.html", TABLE_NO_TH)


@pytest.fixture
def multi_table(write_file):
    return write_file("multi.html", MULTI_TABLE)


@pytest.fixture
def depts_csv(write_file):
    return write_file("DEPTS.csv", DEPTS_CSV)


@pytest.fixture
def emps_csv(write_file):
    return write_file("EMPS.csv", EMPS_CSV)


@pytest.fixture
def sales_dir(depts_csv, emps_csv):
    """Directory holding DEPTS.csv and EMPS.csv"""
    return depts_csv.parent


@pytest.fixture
def mock_response():
    """Factory for a mock httpx streaming response with the given body"""

    def _response(body: bytes):
        response = Mock()
        response.iter_bytes = Mock(return_value=[body])
        response.raise_for_status = Mock()
        return response

    return _response


@pytest.fixture
def table_headerless(write_file):
    return write_file("table_headerless.html", TABLE_HEADERLESS)
