"""Line tokenizer for bill exports.

Payment-app exports are "CSV-ish": quoted fields may contain the delimiter,
but rows never span lines and quoting is not always balanced. The stdlib
:mod:`csv` reader is stricter than these files deserve, so a line is split
with a small state machine instead:

- every quote character toggles the in-quotes state and is dropped;
- the delimiter splits fields only outside quotes;
- each field is whitespace-trimmed (tabs included; Alipay pads with them).

Unbalanced quotes never raise. They may yield an unexpected field count,
which the parsers tolerate by treating short rows as excluded.
"""

from __future__ import annotations


def split_line(line: str, delimiter: str = ",", quote: str = '"') -> list[str]:
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for ch in line:
        if ch == quote:
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    fields.append("".join(current).strip())
    return fields


def split_lines(text: str) -> list[str]:
    """Return the non-blank, whitespace-trimmed lines of ``text``."""

    return [s for s in (line.strip() for line in text.splitlines()) if s]


__all__ = ["split_line", "split_lines"]
