"""Header location and column resolution.

Exports usually start with a human-readable preamble (account holder, date
range, disclaimers) before the real column header. :func:`locate_header`
finds the header line; :func:`resolve_columns` turns it into a
:class:`ColumnMap` that every data row of the file is read through.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .sources import ColumnRule, SemanticField, SourceFormat


@dataclass(frozen=True, slots=True)
class HeaderLocation:
    index: int
    found: bool


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Column index per semantic field for one header row.

    ``None`` means the field is absent for this file. Fields of known
    sources always resolve (keyword match or the descriptor's default).
    """

    date: int | None = None
    amount: int | None = None
    direction: int | None = None
    category: int | None = None
    subcategory: int | None = None
    note: int | None = None
    counterparty: int | None = None
    status: int | None = None

    def index_of(self, f: SemanticField) -> int | None:
        return getattr(self, f.value)


def _fold(s: str, case_insensitive: bool) -> str:
    return s.casefold() if case_insensitive else s


def is_header_line(line: str, fmt: SourceFormat) -> bool:
    text = _fold(line, fmt.case_insensitive)
    return all(
        any(_fold(k, fmt.case_insensitive) in text for k in group) for group in fmt.header_groups
    )


def locate_header(lines: Sequence[str], fmt: SourceFormat) -> HeaderLocation:
    """Return the index of the first line satisfying the header predicate.

    When no line qualifies, the first line is assumed to be the header and
    ``found`` is ``False``. Terse exports without recognizable titles still
    parse this way, at the risk of misreading every column.
    """

    for idx, line in enumerate(lines):
        if is_header_line(line, fmt):
            return HeaderLocation(idx, True)
    return HeaderLocation(0, False)


def find_column(headers: Sequence[str], rule: ColumnRule, *, case_insensitive: bool) -> int | None:
    folded = [_fold(h, case_insensitive) for h in headers]
    keywords = [_fold(k, case_insensitive) for k in rule.keywords]

    if rule.match == "exact":
        for kw in keywords:
            if kw in folded:
                return folded.index(kw)
    else:
        for idx, h in enumerate(folded):
            if any(kw in h for kw in keywords):
                return idx
    return rule.default


def resolve_columns(headers: Sequence[str], fmt: SourceFormat) -> ColumnMap:
    resolved = {
        f.value: find_column(headers, rule, case_insensitive=fmt.case_insensitive)
        for f, rule in fmt.columns.items()
    }
    return ColumnMap(**resolved)


__all__ = [
    "HeaderLocation",
    "ColumnMap",
    "is_header_line",
    "locate_header",
    "find_column",
    "resolve_columns",
]
