"""Error types for Pyre."""

from typing import Optional


class PyreError(Exception):
    """Base class for Pyre errors."""


class UpstreamFetchError(PyreError):
    """A row source failed to deliver a snapshot.

    The original exception is kept as ``cause`` and rendered verbatim;
    nothing in the views layer parses or retries it.
    """

    def __init__(self, cause: BaseException, source: Optional[str] = None):
        super().__init__(str(cause))
        self.cause = cause
        self.source = source

    def __str__(self) -> str:
        return str(self.cause) or self.cause.__class__.__name__


class ConfigError(PyreError):
    """The configuration or state file could not be read or written."""
