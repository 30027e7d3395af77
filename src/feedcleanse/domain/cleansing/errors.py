"""Exceptions raised by the cleansing core."""

from __future__ import annotations


class CleansingError(Exception):
    """Base class for cleansing failures."""


class BatchNotFoundError(CleansingError):
    """Raised when a run is requested for a batch without metadata."""

    def __init__(self, batch_id: str) -> None:
        super().__init__(f"Batch {batch_id!r} not found in reference data")
        self.batch_id = batch_id


class ReferenceLookupError(CleansingError):
    """Raised when a reference table map names an unknown table or column."""


class DateFormatError(ValueError):
    """Raised when a date pattern cannot be translated or a value does not fit it."""
