"""
Error taxonomy for the adapter

Runtime failures raised while resolving, fetching and selecting external
content derive from FileReaderError and always chain the lower-level cause.
Planner-wiring mistakes raise PlanContractError instead.
"""


class FileReaderError(Exception):
    """Base class for errors raised while reading an external source"""


class SourceResolutionError(FileReaderError):
    """Source address is malformed (bad path, unknown URL scheme, bad fragment)"""


class FetchError(FileReaderError):
    """Content could not be fetched (missing file, unreachable host, HTTP error)"""


class NoMatchError(FileReaderError):
    """Table locator matched nothing, or the occurrence index is out of range"""


class MalformedURLError(ValueError):
    """Low-level cause attached to SourceResolutionError for bad URLs"""


class PlanContractError(ValueError):
    """
    A planner-wiring precondition was violated

    Raised for programming mistakes such as building a scan in the wrong
    convention or handing inputs to a leaf. Not meant to be caught and retried.
    """
