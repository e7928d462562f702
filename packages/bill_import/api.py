"""Public entry points for the ``bill_import`` package.

Parsing is a pure function of its inputs: every call builds its own state and
returns a fresh :class:`~bill_import.models.ImportResult`, so callers may run
parses concurrently from worker threads without coordination. File reading
happens up front in :func:`parse_bill_file`; the pipeline itself does no I/O.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from .committer import commit_records
from .errors import FileDecodeError
from .models import ImportResult
from .parsers import parse_text
from .sources import ImportSource

_BOM = "\ufeff"


def parse_bill_text(content: str, source: ImportSource | str | None = None) -> ImportResult:
    """Parse an export already decoded to text.

    Parameters
    ----------
    content:
        Full file content. A leading byte-order mark is ignored.
    source:
        The export's source (member or identifier). ``None`` selects the
        generic bilingual fallback.

    Raises
    ------
    EmptyFileError
        When the content has no non-blank lines.
    UnknownSourceError
        When ``source`` is not a known identifier.
    """

    return parse_text(content.removeprefix(_BOM), source)


def parse_bill_bytes(data: bytes, source: ImportSource | str | None = None) -> ImportResult:
    """Decode ``data`` as UTF-8 (BOM tolerated) and parse it."""

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise FileDecodeError(
            f"export is not valid UTF-8 (byte {exc.start}); re-export the bill as UTF-8 CSV"
        ) from exc
    return parse_bill_text(text, source)


def parse_bill_file(
    path: str | PathLike[str], source: ImportSource | str | None = None
) -> ImportResult:
    """Read an export from disk and parse it."""

    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as exc:
        raise FileDecodeError(f"cannot read {p}: {exc.strerror or exc}") from exc
    return parse_bill_bytes(data, source)


__all__ = [
    "parse_bill_text",
    "parse_bill_bytes",
    "parse_bill_file",
    "commit_records",
]
