"""
Reader factory - pick a reader for a source address

Format comes from, in order: the explicit argument, the address fragment
(source#format:index), the file suffix. Network URLs without a known suffix
are treated as HTML pages; local files without one as CSV.
"""

from typing import Optional

from tableadapter.core.fragment_parser import parse_source_fragment
from tableadapter.core.sources import SourceLocator, resolve_source
from tableadapter.readers.base import TabularReader

SUFFIX_FORMATS = {
    ".html": "html",
    ".htm": "html",
    ".csv": "csv",
    ".tsv": "tsv",
    ".json": "json",
}


def detect_format(locator: SourceLocator) -> str:
    """Guess the reader format from a resolved locator"""
    detected = SUFFIX_FORMATS.get(locator.suffix)
    if detected:
        return detected
    return "html" if locator.is_remote else "csv"


def create_reader(
    source,
    selector: Optional[str] = None,
    index: Optional[int] = None,
    format: Optional[str] = None,
    **kwargs,
) -> TabularReader:
    """
    Create the reader for a source address

    Args:
        source: Path or URL, optionally with #format:index fragment
        selector: Table locator (HTML only)
        index: Occurrence index of the table (HTML only); overrides the fragment
        format: Explicit format (csv, tsv, json, html); overrides the fragment
        **kwargs: Passed to the reader

    Returns:
        Reader instance (content already fetched)

    Raises:
        SourceResolutionError: If the address or fragment is malformed
        FetchError: If the content cannot be fetched
        NoMatchError: If the table locator matches nothing
        ValueError: If a table locator is given for a flat format, or reader
            options for an html source
    """
    if isinstance(source, str):
        source, format_hint, index_hint = parse_source_fragment(source)
    else:
        format_hint, index_hint = None, None

    locator = resolve_source(source)
    format_to_use = format or format_hint or detect_format(locator)
    if index is None:
        index = index_hint

    if format_to_use == "html":
        from tableadapter.readers.html_reader import HTMLReader

        if kwargs:
            raise ValueError(f"html sources take no reader options: {', '.join(sorted(kwargs))}")
        return HTMLReader(locator, selector, index or 0)

    if selector is not None or index:
        raise ValueError(f"{format_to_use} sources hold a single table; no table locator allowed")

    if format_to_use == "json":
        from tableadapter.readers.json_reader import JSONReader

        return JSONReader(locator, **kwargs)

    from tableadapter.readers.csv_reader import CSVReader

    if format_to_use == "tsv":
        kwargs.setdefault("delimiter", "\t")
    return CSVReader(locator, **kwargs)
