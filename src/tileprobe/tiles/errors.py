"""Fetch error taxonomy.

Every failure of a single tile fetch is a ``FetchError``. None of them are
recovered where they are raised; the failure policy decides whether the
whole run aborts (default) or the tile is reported as failed.
"""

from typing import Optional

__all__ = [
    'FetchError',
    'TransportError',
    'DecompressionError',
    'DecodeError',
    'FetchCancelled',
]


class FetchError(RuntimeError):
    """Base class for failures of one tile fetch.

    Carries the coordinate and URL so the user can tell which tile failed.
    """

    def __init__(self, message: str, coordinate=None, url: Optional[str] = None):
        super().__init__(message)
        self.coordinate = coordinate
        self.url = url

    def __str__(self) -> str:
        message = super().__str__()
        if self.url:
            return f"{message} [tile {self.coordinate} {self.url}]"
        return message


class TransportError(FetchError):
    """No usable response: connection refused, timeout, body read error, HTTP error status."""


class DecompressionError(FetchError):
    """Response declared gzip encoding but the body is not valid gzip."""


class DecodeError(FetchError):
    """Response body is not a valid vector tile payload."""


class FetchCancelled(FetchError):
    """Fetch skipped because the run was already cancelled by another failure."""
