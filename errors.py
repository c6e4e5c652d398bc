"""Exceptions raised by the checker's collaborators."""

from __future__ import annotations

__all__ = [
    "CheckerError",
    "FetchError",
    "FetchCancelled",
    "ParseError",
    "DeliveryError",
    "ReportError",
]


class CheckerError(Exception):
    """Base class for recoverable, cycle-level failures."""


class FetchError(CheckerError):
    """Navigation, readiness-wait or content extraction failed."""


class FetchCancelled(FetchError):
    """The fetch was aborted because shutdown was requested."""


class ParseError(CheckerError):
    """The HTML fragment could not be turned into a document tree."""


class DeliveryError(CheckerError):
    """The notification email could not be delivered."""


class ReportError(CheckerError):
    """The status endpoint rejected the report or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
