"""
Source locators - resolve and fetch external content

A source address is either a filesystem path or a URL. Resolution happens
eagerly and only checks syntax; content is fetched later, when a reader asks
for it.

Supported addresses:
- Local paths: "data/cities.html", Path objects
- file:// URLs
- http:// and https:// URLs (fetched with httpx)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from tableadapter.errors import FetchError, MalformedURLError, SourceResolutionError

logger = logging.getLogger(__name__)

KNOWN_PROTOCOLS = ("file", "http", "https")

_SCHEME_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*)://")


@dataclass(frozen=True)
class SourceLocator:
    """
    Resolved address of an external source

    Attributes:
        address: Address as given by the caller
        protocol: "file", "http" or "https"
        path: Local path for file sources, None for network sources
    """

    address: str
    protocol: str
    path: Path | None = None

    @property
    def is_remote(self) -> bool:
        return self.protocol in ("http", "https")

    @property
    def url(self) -> str:
        if self.is_remote:
            return self.address
        return self.path.resolve().as_uri()

    @property
    def name(self) -> str:
        """Last path segment without its suffix (e.g. 'DEPTS' for DEPTS.csv)"""
        if self.path is not None:
            return self.path.stem
        segment = urlparse(self.address).path.rstrip("/").rsplit("/", 1)[-1]
        return Path(unquote(segment)).stem or urlparse(self.address).netloc

    @property
    def suffix(self) -> str:
        if self.path is not None:
            return self.path.suffix.lower()
        return Path(urlparse(self.address).path).suffix.lower()

    def fetch(self) -> bytes:
        """
        Fetch the raw content

        Not retried internally; callers retry by fetching again.

        Returns:
            Content bytes

        Raises:
            FetchError: If the file cannot be read or the request fails
        """
        if self.is_remote:
            return self._download()

        logger.debug("Reading %s", self.path)
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise FetchError(f"Failed to read {self.path}: {e}") from e

    def _download(self) -> bytes:
        logger.debug("Downloading %s", self.address)
        try:
            with httpx.stream("GET", self.address, follow_redirects=True) as response:
                response.raise_for_status()
                return b"".join(response.iter_bytes(chunk_size=8192))
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to download {self.address}: {e}") from e

    def __str__(self) -> str:
        return self.address


def resolve_source(address: str | Path | SourceLocator) -> SourceLocator:
    """
    Resolve an address into a SourceLocator without touching its content

    Args:
        address: Filesystem path, file:// URL or http(s):// URL

    Returns:
        SourceLocator

    Raises:
        SourceResolutionError: If the address is malformed. An unknown URL
            scheme produces the message "unknown protocol: <scheme>".
    """
    if isinstance(address, SourceLocator):
        return address

    if isinstance(address, Path):
        return SourceLocator(str(address), "file", address)

    if not isinstance(address, str) or not address.strip():
        raise SourceResolutionError(f"Invalid source address: {address!r}") from ValueError(
            "source address must be a non-empty string"
        )

    match = _SCHEME_PATTERN.match(address)
    if match is None:
        if "\x00" in address:
            raise SourceResolutionError(f"Invalid source path: {address!r}") from ValueError(
                "embedded null byte"
            )
        return SourceLocator(address, "file", Path(address))

    protocol = match.group(1).lower()
    if protocol not in KNOWN_PROTOCOLS:
        message = f"unknown protocol: {match.group(1)}"
        raise SourceResolutionError(message) from MalformedURLError(message)

    parsed = urlparse(address)

    if protocol == "file":
        if parsed.netloc not in ("", "localhost"):
            message = f"unsupported file URL host: {parsed.netloc}"
            raise SourceResolutionError(message) from MalformedURLError(message)
        return SourceLocator(address, "file", Path(unquote(parsed.path)))

    if not parsed.netloc:
        message = f"no host in URL: {address}"
        raise SourceResolutionError(message) from MalformedURLError(message)

    return SourceLocator(address, protocol)
