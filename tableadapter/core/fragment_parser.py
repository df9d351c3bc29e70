"""
URL Fragment Parser - Parse source#format:index syntax

Lets a single address string carry the reader format and the occurrence
index of the table to read, e.g. "page.html#html:1".
"""

from typing import Optional, Tuple

from tableadapter.errors import SourceResolutionError

SUPPORTED_FORMATS = ("csv", "tsv", "json", "html")


class FragmentParseError(SourceResolutionError):
    """Raised when fragment parsing fails"""
    pass


def parse_source_fragment(source: str) -> Tuple[str, Optional[str], Optional[int]]:
    """
    Parse source address with optional fragment

    Syntax: source#format:index

    Examples:
        "data.csv" → ("data.csv", None, None)
        "data.html#html" → ("data.html", "html", None)
        "page.html#html:1" → ("page.html", "html", 1)
        "page.html#:-1" → ("page.html", None, -1)
        "https://example.com/data#csv" → ("https://example.com/data", "csv", None)

    Args:
        source: Source path or URL, optionally with #format:index fragment

    Returns:
        Tuple of (source_path, format, index)

    Raises:
        FragmentParseError: If fragment syntax is invalid
    """
    if '#' not in source:
        return (source, None, None)

    # Split on LAST # - the fragment is always the final part
    source_path, fragment = source.rsplit('#', 1)

    if not fragment:
        return (source_path, None, None)

    if ':' in fragment:
        format_part, index_part = fragment.split(':', 1)
        format_spec = _validate_format(format_part.strip() or None)

        if not index_part.strip():
            raise FragmentParseError("Table index cannot be empty after ':'")

        try:
            index = int(index_part)
        except ValueError as e:
            raise FragmentParseError(
                f"Invalid table index: '{index_part}'. Must be an integer."
            ) from e

        return (source_path, format_spec, index)

    return (source_path, _validate_format(fragment.strip()), None)


def _validate_format(format_spec: Optional[str]) -> Optional[str]:
    if format_spec is not None and format_spec not in SUPPORTED_FORMATS:
        raise FragmentParseError(
            f"Unknown format '{format_spec}'. "
            f"Supported formats: {', '.join(SUPPORTED_FORMATS)}"
        )
    return format_spec
