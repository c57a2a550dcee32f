"""
Exception hierarchy for feed generation.

Every error a source can raise derives from FeedwrightError so the runner
can isolate one failing source from the others:
- ConfigurationError: bad selectors, missing container, unknown source
- TransportError: network failure or non-2xx HTTP status
- ParseError: malformed markup, upstream payload, or persisted state
- StateIOError: genuine I/O failure reading or writing persisted state
- OutputError: the feed document could not be written

Field-level problems are not exceptions; see FieldIssue in core.types.
"""

from __future__ import annotations


class FeedwrightError(Exception):
    """Base class for all feed generation errors."""


class ConfigurationError(FeedwrightError):
    """Raised when a source or field map is misconfigured."""


class TransportError(FeedwrightError):
    """Raised when an HTTP request fails or returns a non-2xx status.

    Attributes:
        url: The URL that was requested
        status_code: HTTP status code, or None for network-level failures
    """

    def __init__(self, url: str, message: str, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        if status_code is not None:
            message = f"{message} (status {status_code})"
        super().__init__(f"{url}: {message}")


class ParseError(FeedwrightError):
    """Raised when markup, an upstream payload, or state JSON cannot be parsed."""


class StateIOError(FeedwrightError):
    """Raised when persisted state cannot be read or written."""


class OutputError(FeedwrightError):
    """Raised when a rendered feed cannot be written to disk."""
