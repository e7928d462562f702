"""Per-row pipeline shared by every source.

A source is parsed by locating its header, resolving a :class:`ColumnMap`
once, then running each following line through :func:`parse_row`:

1. tokenize; rows too short for the required columns are excluded;
2. status filter (closed/refunded rows are excluded);
3. date, rejected when unparseable;
4. amount, rejected when unparseable or zero;
5. direction (transfers are excluded);
6. category and note;
7. build the :class:`ImportedRecord`.

Excluded rows never count as failures; rejected rows always do.
"""

from __future__ import annotations

from collections.abc import Sequence

from .aggregator import ResultAggregator
from .columns import ColumnMap, locate_header, resolve_columns
from .errors import EmptyFileError
from .logging_setup import get_logger
from .models import ImportedRecord, ImportResult, ParseWarning, RowOutcome
from .normalizers import (
    build_note,
    is_excluded_status,
    map_category,
    parse_amount,
    parse_date,
    resolve_direction,
)
from .sources import ImportSource, SourceFormat, get_format
from .tokenizer import split_line, split_lines

logger = get_logger("bill_import.parsers")


def _cell(fields: Sequence[str], idx: int | None) -> str | None:
    if idx is None or idx >= len(fields):
        return None
    return fields[idx]


def _raw_fields(headers: Sequence[str], fields: Sequence[str]) -> dict[str, str]:
    # First occurrence wins for repeated header titles.
    raw: dict[str, str] = {}
    for h, v in zip(headers, fields, strict=False):
        raw.setdefault(h, v)
    return raw


def parse_row(
    fields: Sequence[str],
    headers: Sequence[str],
    columns: ColumnMap,
    fmt: SourceFormat,
) -> RowOutcome:
    """Run one tokenized data row through the source pipeline."""

    needed = [columns.index_of(f) for f in fmt.required]
    if any(i is None or i >= len(fields) for i in needed):
        return RowOutcome.excluded(f"too few fields ({len(fields)})")

    status = _cell(fields, columns.status)
    if is_excluded_status(status, fmt):
        return RowOutcome.excluded(f"status {status!r}")

    raw_date = fields[columns.date]  # type: ignore[index]
    when = parse_date(raw_date)
    if when is None:
        return RowOutcome.rejected(f"cannot parse date: {raw_date}")

    raw_amount = fields[columns.amount]  # type: ignore[index]
    try:
        amount = parse_amount(raw_amount)
    except ValueError as exc:
        return RowOutcome.rejected(f"cannot parse amount: {raw_amount} ({exc})")

    direction = resolve_direction(
        _cell(fields, columns.direction),
        amount.negative,
        fmt.direction,
        case_insensitive=fmt.case_insensitive,
    )
    if direction is None:
        return RowOutcome.excluded("transfer")

    record = ImportedRecord(
        date=when,
        amount=amount.magnitude,
        direction=direction,
        category=map_category(
            _cell(fields, columns.category), fmt, _cell(fields, columns.subcategory)
        ),
        note=build_note(
            _cell(fields, columns.counterparty),
            _cell(fields, columns.note),
            fmt.counterparty_placeholders,
        ),
        raw_fields=_raw_fields(headers, fields),
    )
    return RowOutcome.accepted(record)


def parse_lines(lines: Sequence[str], source: ImportSource | str | None = None) -> ImportResult:
    """Parse pre-split, non-blank lines of one export.

    Raises
    ------
    EmptyFileError
        When ``lines`` is empty.
    UnknownSourceError
        When ``source`` names no known format.
    """

    fmt = get_format(source)
    if not lines:
        raise EmptyFileError("export contains no non-blank lines")

    agg = ResultAggregator(fmt.source.value)
    location = locate_header(lines, fmt)
    if not location.found:
        agg.warn(ParseWarning.HEADER_NOT_FOUND)
        logger.warning(
            "%s: no header row found; treating line 1 as the header", fmt.source.value
        )

    headers = split_line(lines[location.index])
    columns = resolve_columns(headers, fmt)
    logger.debug("%s: header at line %d, columns %s", fmt.source.value, location.index + 1, columns)

    for idx in range(location.index + 1, len(lines)):
        outcome = parse_row(split_line(lines[idx]), headers, columns, fmt)
        agg.add(outcome, idx + 1)

    result = agg.finish()
    logger.info(
        "%s: %d imported, %d failed, %d excluded",
        fmt.source.value,
        result.success_count,
        result.failed_count,
        result.excluded_count,
    )
    return result


def parse_text(text: str, source: ImportSource | str | None = None) -> ImportResult:
    return parse_lines(split_lines(text), source)


__all__ = ["parse_row", "parse_lines", "parse_text"]
