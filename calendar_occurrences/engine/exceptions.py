"""Exception hierarchy for the calendar occurrence engine."""

from __future__ import annotations


class OccurrenceEngineError(Exception):
    """Base exception for all occurrence engine errors."""


class InvalidRange(OccurrenceEngineError):
    """The requested query window is missing, unparseable or inverted.

    Attributes:
        start: The raw start value supplied by the caller.
        end: The raw end value supplied by the caller.
    """

    def __init__(self, message: str, *, start: object = None, end: object = None) -> None:
        super().__init__(message)
        self.start = start
        self.end = end


class RowStoreError(OccurrenceEngineError):
    """Fetching anchor rows from the backing store failed."""


class ConfigError(OccurrenceEngineError):
    """Engine configuration failed validation."""
