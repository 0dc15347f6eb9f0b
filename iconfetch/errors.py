"""Exceptions raised while resolving charm icons.

Every failure surfaced by a resolver derives from :class:`IconFetchError`, so
callers that only care whether a batch succeeded can catch the base class.
None of these are retried.
"""
from __future__ import annotations


class IconFetchError(RuntimeError):
    """Base class for icon resolution failures."""


class ParseError(IconFetchError):
    """Raised when a raw charm reference cannot be parsed."""

    def __init__(self, raw: str, reason: str):
        super().__init__(f"cannot parse charm {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


class TransportError(IconFetchError):
    """Raised when the request for an icon fails before a response arrives."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(f"HTTP error fetching {url}: {cause}")
        self.url = url


class HTTPStatusError(IconFetchError):
    """Raised when the icon endpoint answers with a non-2xx status."""

    def __init__(self, url: str, status_code: int, reason: str = ""):
        status = f"{status_code} {reason}".strip()
        super().__init__(f"cannot retrieve icon from {url}: {status}")
        self.url = url
        self.status_code = status_code


class ReadError(IconFetchError):
    """Raised when the icon body cannot be read in full."""

    def __init__(self, url: str, cause: BaseException):
        super().__init__(f"could not read icon data from url {url}: {cause}")
        self.url = url


__all__ = [
    "IconFetchError",
    "ParseError",
    "TransportError",
    "HTTPStatusError",
    "ReadError",
]
