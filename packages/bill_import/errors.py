"""Fatal error taxonomy for bill imports.

Only whole-file problems raise. Row-level problems (bad dates, bad amounts,
filtered statuses) are folded into :class:`~bill_import.models.ImportResult`
and never surface as exceptions.
"""

from __future__ import annotations


class BillImportError(Exception):
    """Base class for errors that abort an entire import."""


class FileDecodeError(BillImportError):
    """The export could not be read or is not valid UTF-8 text."""


class EmptyFileError(BillImportError):
    """The export contains no non-blank lines."""


class UnknownSourceError(BillImportError, ValueError):
    """A source identifier does not name any known export format."""


__all__ = [
    "BillImportError",
    "FileDecodeError",
    "EmptyFileError",
    "UnknownSourceError",
]
