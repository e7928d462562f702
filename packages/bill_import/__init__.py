"""Public interface for the ``bill_import`` package.

Re-exports the parse/commit entry points and the models callers handle. No
runtime logic lives here.
"""

from .api import commit_records, parse_bill_bytes, parse_bill_file, parse_bill_text
from .committer import TransactionSink, resolve_category_id
from .errors import BillImportError, EmptyFileError, FileDecodeError, UnknownSourceError
from .models import (
    OTHER_CATEGORY,
    CategoryRef,
    CommitOutcome,
    CommitReport,
    Direction,
    ImportedRecord,
    ImportResult,
    NewTransaction,
    ParseWarning,
)
from .sources import ImportSource, get_format

__all__ = [
    # API
    "parse_bill_text",
    "parse_bill_bytes",
    "parse_bill_file",
    "commit_records",
    "resolve_category_id",
    "get_format",
    # Models / types
    "ImportSource",
    "Direction",
    "ImportedRecord",
    "ImportResult",
    "ParseWarning",
    "CategoryRef",
    "NewTransaction",
    "CommitOutcome",
    "CommitReport",
    "TransactionSink",
    "OTHER_CATEGORY",
    # Errors
    "BillImportError",
    "FileDecodeError",
    "EmptyFileError",
    "UnknownSourceError",
]
