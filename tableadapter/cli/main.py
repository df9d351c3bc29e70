"""
tableadapter CLI - inspect external tables and the plans built over them

Usage:
    tableadapter headings <source> [options]   # detected header row
    tableadapter rows <source> [options]       # data rows
    tableadapter tables <source>               # tables found in an HTML page
    tableadapter plan <source> [options]       # plan a scan with pushdown
"""

import json
import logging
import re
import sys
from typing import Optional

import click

from tableadapter import __version__
from tableadapter.cli.formatters import FORMATTERS, get_formatter
from tableadapter.core.expressions import AggregateFunction, Condition
from tableadapter.core.factory import create_reader
from tableadapter.core.schema import Relation
from tableadapter.core.traits import PlanContext
from tableadapter.errors import FileReaderError
from tableadapter.operators.converter import EnumerableConverter
from tableadapter.operators.filter import Filter
from tableadapter.operators.groupby import GroupBy
from tableadapter.operators.project import Project
from tableadapter.optimizers.planner import RulePlanner, walk

_CONDITION = re.compile(r"^\s*(.+?)\s*(>=|<=|!=|=|>|<)\s*(.*?)\s*$")
_AGGREGATE = re.compile(r"^\s*(\w+)\s*\(\s*(\*|[^)]+?)\s*\)(?:\s+as\s+(\w+))?\s*$", re.IGNORECASE)


def _literal(text: str):
    """Quoted text stays text; anything that parses as a number is one"""
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            pass
    return text


def parse_condition(text: str) -> Condition:
    """
    Parse a --where option

    Examples:
        "salary > 1000", "name = 'Bob'", "DEPTNO != 10"
    """
    match = _CONDITION.match(text)
    if not match:
        raise click.BadParameter(f"Expected 'column op value', got {text!r}")
    column, operator, value = match.groups()
    return Condition(column, operator, _literal(value))


def parse_aggregate(text: str) -> AggregateFunction:
    """
    Parse an --agg option

    Examples:
        "COUNT(*)", "sum(salary) AS total"
    """
    match = _AGGREGATE.match(text)
    if not match:
        raise click.BadParameter(f"Expected 'FN(column) [AS alias]', got {text!r}")
    function, column, alias = match.groups()
    try:
        return AggregateFunction(function.upper(), column, alias)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _reader_options(delimiter: Optional[str], no_header: bool, records_key: Optional[str]) -> dict:
    options = {}
    if delimiter is not None:
        options["delimiter"] = delimiter
    if no_header:
        options["has_header"] = False
    if records_key is not None:
        options["records_key"] = records_key
    return options


def _emit(rows, columns, fmt: str, output: Optional[str], no_color: bool) -> None:
    formatter = get_formatter(fmt)
    text = formatter.format(
        rows,
        columns,
        no_color=no_color or (output is not None) or (not sys.stdout.isatty()),
        show_footer=not output,
    )
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        click.echo(f"Results written to {output} ({fmt} format)", err=True)
    else:
        click.echo(text, nl=not text.endswith("\n"))


def _fail(error: Exception) -> None:
    message = f"Error: {error}"
    if error.__cause__ is not None:
        message += f" (caused by {type(error.__cause__).__name__}: {error.__cause__})"
    click.echo(message, err=True)
    sys.exit(1)


def source_options(func):
    """Options shared by every command that opens a source"""
    func = click.option("--records-key", type=str, default=None, help="Dotted path to the records array (JSON)")(func)
    func = click.option("--no-header", is_flag=True, help="First record is data, not a header (CSV/TSV)")(func)
    func = click.option("--delimiter", "-d", type=str, default=None, help="Field delimiter (CSV/TSV)")(func)
    func = click.option(
        "--type",
        "-t",
        "source_format",
        type=click.Choice(["csv", "tsv", "json", "html"], case_sensitive=False),
        default=None,
        help="Source format (default: detected from suffix or #fragment)",
    )(func)
    func = click.option("--index", "-i", type=int, default=None, help="0-based occurrence of the matched table")(func)
    func = click.option("--selector", "-s", type=str, default=None, help="CSS selector of the table (HTML)")(func)
    return func


def output_options(func):
    func = click.option("--no-color", is_flag=True, help="Disable colored output")(func)
    func = click.option("--output", "-o", type=click.Path(), default=None, help="Write output to file instead of stdout")(func)
    func = click.option(
        "--format",
        "-f",
        "fmt",
        type=click.Choice(list(FORMATTERS), case_sensitive=False),
        default="table",
        help="Output format (default: table)",
    )(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="tableadapter")
@click.option("--verbose", "-v", is_flag=True, help="Log fetches, header detection and rule applications")
def cli(verbose: bool):
    """
    tableadapter - read tables out of HTML pages and record files

    Sources are file paths or file://, http:// and https:// URLs, optionally
    followed by #format:index.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("source", type=str)
@source_options
@click.option("--json", "as_json", is_flag=True, help="Print the headings as a JSON array")
def headings(source, selector, index, source_format, delimiter, no_header, records_key, as_json):
    """
    Print the header row of a table

    Examples:

        \b
        $ tableadapter headings data/emps.csv
        $ tableadapter headings https://example.org/page -s table.wikitable -i 1
    """
    try:
        reader = create_reader(
            source, selector, index, source_format, **_reader_options(delimiter, no_header, records_key)
        )
        names = reader.get_headings()
    except (FileReaderError, ValueError) as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps(names))
    else:
        for name in names:
            click.echo(name)


@cli.command()
@click.argument("source", type=str)
@source_options
@output_options
@click.option("--limit", "-l", type=int, default=None, help="Limit number of rows displayed")
def rows(source, selector, index, source_format, delimiter, no_header, records_key, fmt, output, no_color, limit):
    """
    Print the data rows of a table

    Examples:

        \b
        $ tableadapter rows data/emps.csv -f json
        $ tableadapter rows "https://example.org/page#html:2" -l 10
    """
    try:
        reader = create_reader(
            source, selector, index, source_format, **_reader_options(delimiter, no_header, records_key)
        )
        columns = reader.get_headings()
        results = []
        for row in reader.read_lazy():
            if limit is not None and len(results) >= limit:
                break
            results.append(row)
    except (FileReaderError, ValueError) as e:
        _fail(e)
        return

    _emit(results, columns, fmt, output, no_color)


@cli.command()
@click.argument("source", type=str)
def tables(source):
    """
    List the tables of an HTML document

    Examples:

        \b
        $ tableadapter tables https://example.org/page
    """
    try:
        reader = create_reader(source, format="html")
    except (FileReaderError, ValueError) as e:
        _fail(e)
        return

    for description in reader.list_tables():
        click.echo(description)


@cli.command()
@click.argument("source", type=str)
@source_options
@output_options
@click.option("--name", "-n", "table_name", type=str, default="T", help="Table name used in the plan (default: T)")
@click.option("--where", "-w", "conditions", multiple=True, help="Filter condition, e.g. 'salary > 1000' (repeatable)")
@click.option("--columns", "-c", type=str, default=None, help="Comma-separated columns to project")
@click.option("--group-by", "-g", type=str, default=None, help="Comma-separated grouping columns")
@click.option("--agg", "-a", "aggregates", multiple=True, help="Aggregate, e.g. 'COUNT(*)' (repeatable)")
@click.option("--rows", "row_count", type=int, default=None, help="Row count estimate for the cost model")
@click.option("--execute", "-x", is_flag=True, help="Run the plan and print its rows")
def plan(
    source,
    selector,
    index,
    source_format,
    delimiter,
    no_header,
    records_key,
    fmt,
    output,
    no_color,
    table_name,
    conditions,
    columns,
    group_by,
    aggregates,
    row_count,
    execute,
):
    """
    Plan a scan with filters, projection and aggregation pushed down

    Prints the optimized plan, the rewrites applied, and the request each
    external subtree sends to its source.

    Examples:

        \b
        $ tableadapter plan data/emps.csv -w "salary > 1000" -c name,salary
        $ tableadapter plan data/emps.csv -g deptno -a "COUNT(*)" -a "AVG(salary)" -x
    """
    try:
        where = [parse_condition(text) for text in conditions]
        aggs = [parse_aggregate(text) for text in aggregates]
        keys = [c.strip() for c in group_by.split(",")] if group_by else []
        projection = [c.strip() for c in columns.split(",")] if columns else ["*"]

        relation = Relation(
            table_name,
            source,
            selector=selector,
            index=index,
            format=source_format,
            row_count=row_count,
            **_reader_options(delimiter, no_header, records_key),
        )
        planner = RulePlanner()
        node = relation.scan(PlanContext(planner))
        if where:
            node = Filter(node, where)
        if keys or aggs:
            node = GroupBy(node, keys, aggs)
        node = Project(node, projection)

        before = planner.cost(node)
        optimized = planner.optimize(node)
        after = planner.cost(optimized)

        click.echo("\n".join(optimized.explain()))
        click.echo(f"\nCost: {before!r} -> {after!r}")
        click.echo(planner.get_optimization_summary())
        for converter in (n for n in walk(optimized) if isinstance(n, EnumerableConverter)):
            click.echo("\nExternal request:")
            click.echo(json.dumps(converter.implement().describe(), indent=2, default=str))

        if execute:
            results = list(optimized)
            click.echo("")
            _emit(results, optimized.row_shape().field_names, fmt, output, no_color)
    except (FileReaderError, ValueError, KeyError) as e:
        _fail(e)


if __name__ == "__main__":
    cli()
