"""Exceptions raised before any remote call is made."""

from __future__ import annotations


class TfveError(Exception):
    """Base class for tfve errors."""


class ExportListParseError(TfveError):
    """A malformed line in the export list."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"Export list line {line_number}: {reason}: {line!r}")


class OutputsFileError(TfveError):
    """The outputs file could not be read or has an unexpected shape."""
