"""Field normalizers shared by every source pipeline.

Each helper is a pure function over raw cell strings. Amounts come back as a
``Decimal`` magnitude plus a separately tracked sign; whether that sign
decides the transaction direction is a per-source policy applied by
:func:`resolve_direction`.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import NamedTuple

from .models import OTHER_CATEGORY, Direction
from .sources import DirectionRule, SourceFormat

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

# Tried in order; first successful parse wins. Month-first precedes
# day-first for ambiguous slash dates.
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
)


def parse_date(raw: str | None, formats: tuple[str, ...] = DATE_FORMATS) -> datetime | None:
    """Parse an export timestamp, returning ``None`` when no pattern fits.

    All patterns are numeric, so parsing does not depend on the process
    locale.
    """

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    for fmt in formats:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    return None


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

CURRENCY_SYMBOLS: tuple[str, ...] = ("¥", "￥", "$", "€", "£", "元")


class ParsedAmount(NamedTuple):
    magnitude: Decimal
    negative: bool


def parse_amount(raw: str | None) -> ParsedAmount:
    """Normalize a raw amount cell into a positive magnitude and a sign.

    Currency symbols, thousands separators and whitespace are removed. A
    leading ``-``, a trailing ``-`` or surrounding parentheses mark the value
    negative; a leading ``+`` is ignored.

    Raises
    ------
    ValueError
        When the cell is empty, not numeric, not finite, or zero.
    """

    if raw is None:
        raise ValueError("amount is required")
    s = raw.strip()
    if not s:
        raise ValueError("amount is empty")

    for sym in CURRENCY_SYMBOLS:
        s = s.replace(sym, "")
    s = "".join(s.replace(",", "").split())

    negative = False
    # Strip sign markers until stable so "-(1,234.56)" and "(-5)" both work.
    while s:
        if s[0] == "+":
            s = s[1:]
        elif s[0] == "-":
            negative = not negative
            s = s[1:]
        elif s[-1] == "-":
            negative = not negative
            s = s[:-1]
        elif s[0] == "(" and s[-1] == ")" and len(s) >= 2:
            negative = not negative
            s = s[1:-1]
        else:
            break

    try:
        d = Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    if d.is_signed():
        negative = not negative
        d = -d
    if d == 0:
        raise ValueError(f"amount is zero: {raw!r}")
    return ParsedAmount(d, negative)


# ---------------------------------------------------------------------------
# Direction, category, status, note
# ---------------------------------------------------------------------------


def _contains_any(value: str, keywords: tuple[str, ...], case_insensitive: bool) -> bool:
    if case_insensitive:
        value = value.casefold()
        return any(k.casefold() in value for k in keywords)
    return any(k in value for k in keywords)


def resolve_direction(
    flag: str | None,
    negative: bool,
    rule: DirectionRule,
    *,
    case_insensitive: bool = False,
) -> Direction | None:
    """Decide expense vs income for one row.

    ``flag`` is the row's direction/type cell, or ``None`` when the source has
    no such column or the row is too short to hold it. Returns ``None`` for
    transfers, which are not imported at all.
    """

    if flag is not None:
        if _contains_any(flag, rule.transfer_keywords, case_insensitive):
            return None
        if _contains_any(flag, rule.income_keywords, case_insensitive):
            return Direction.INCOME
        if rule.expense_keywords is None:
            return Direction.EXPENSE
        if _contains_any(flag, rule.expense_keywords, case_insensitive):
            return Direction.EXPENSE
    if rule.sign_fallback:
        return Direction.EXPENSE if negative else Direction.INCOME
    return Direction.EXPENSE


def map_category(native: str | None, fmt: SourceFormat, subcategory: str | None = None) -> str:
    """Translate a native category label into the canonical label space.

    Mapped sources match table keys by substring containment (native labels
    can be compound, e.g. ``"餐饮美食/外卖"``); the first matching pair wins.
    Passthrough sources keep the native label. Anything empty or unmatched
    becomes :data:`~bill_import.models.OTHER_CATEGORY`.
    """

    if fmt.category_mode == "mapped":
        if native:
            for key, canonical in fmt.category_map:
                if key in native:
                    return canonical
        return OTHER_CATEGORY
    if fmt.category_mode == "subcategory" and subcategory and subcategory.strip():
        return subcategory.strip()
    label = (native or "").strip()
    return label or OTHER_CATEGORY


def is_excluded_status(status: str | None, fmt: SourceFormat) -> bool:
    """True when a status cell marks the row as closed/refunded."""

    if not status or not fmt.status_excluded:
        return False
    return _contains_any(status, fmt.status_excluded, fmt.case_insensitive)


def build_note(
    counterparty: str | None, note: str | None, placeholders: tuple[str, ...] = ()
) -> str:
    """Combine counterparty and free text as ``"<counterparty> - <note>"``."""

    text = (note or "").strip()
    party = (counterparty or "").strip()
    if not party or party in placeholders:
        return text
    return f"{party} - {text}" if text else party


__all__ = [
    "DATE_FORMATS",
    "CURRENCY_SYMBOLS",
    "ParsedAmount",
    "parse_date",
    "parse_amount",
    "resolve_direction",
    "map_category",
    "is_excluded_status",
    "build_note",
]
