"""Data models for ``bill_import``.

Parse-phase records are plain dataclasses: they are produced and consumed in
process and never cross a serialization boundary on their own. The commit
phase talks to external collaborators (category list, persistence sink), so
its DTOs are pydantic models validated on construction.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Canonical fallback label for records whose native category is unknown.
OTHER_CATEGORY = "Other"


class Direction(StrEnum):
    """Money flow of a transaction, tracked separately from the amount."""

    EXPENSE = "expense"
    INCOME = "income"


class ParseWarning(StrEnum):
    """Non-fatal conditions worth surfacing alongside a parse result."""

    # No line matched the source's header predicate; line 0 was used instead.
    HEADER_NOT_FOUND = "header_not_found"


class OutcomeKind(StrEnum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXCLUDED = "excluded"


# ---------------------------------------------------------------------------
# Parse phase
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ImportedRecord:
    """One normalized, selectable candidate transaction.

    ``amount`` is always a strictly positive magnitude; ``direction`` carries
    the sign information. ``id`` is opaque and excluded from comparisons so
    that two parses of the same file compare equal.
    """

    date: datetime
    amount: Decimal
    direction: Direction
    category: str
    note: str = ""
    raw_fields: dict[str, str] = field(default_factory=dict)
    selected: bool = True
    id: str = field(default_factory=lambda: uuid.uuid4().hex, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise TypeError("ImportedRecord.amount must be a Decimal")
        if not self.amount.is_finite() or self.amount <= 0:
            raise ValueError(f"ImportedRecord.amount must be positive, got {self.amount}")


@dataclass(frozen=True, slots=True)
class RowOutcome:
    """Result of running one data row through a source pipeline.

    ``REJECTED`` rows count as failures and carry a human-readable reason.
    ``EXCLUDED`` rows (filtered statuses, transfers, truncated rows) are
    dropped without touching the success/failure counters.
    """

    kind: OutcomeKind
    record: ImportedRecord | None = None
    reason: str | None = None

    @classmethod
    def accepted(cls, record: ImportedRecord) -> RowOutcome:
        return cls(OutcomeKind.ACCEPTED, record=record)

    @classmethod
    def rejected(cls, reason: str) -> RowOutcome:
        return cls(OutcomeKind.REJECTED, reason=reason)

    @classmethod
    def excluded(cls, reason: str) -> RowOutcome:
        return cls(OutcomeKind.EXCLUDED, reason=reason)


@dataclass(slots=True)
class ImportResult:
    """Aggregate outcome of parsing one export file.

    Invariants
    ----------
    - ``success_count + failed_count`` equals the number of data rows that
      reached rejection logic; excluded rows are tallied in
      ``excluded_count`` only.
    - ``success_count == len(records)`` and ``failed_count == len(errors)``.
    - ``duplicate_count`` is reserved and always zero: no deduplication
      policy exists yet.
    """

    source: str
    success_count: int = 0
    failed_count: int = 0
    duplicate_count: int = 0
    excluded_count: int = 0
    records: list[ImportedRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)

    @property
    def header_found(self) -> bool:
        return ParseWarning.HEADER_NOT_FOUND not in self.warnings

    def selected_records(self) -> list[ImportedRecord]:
        return [r for r in self.records if r.selected]


# ---------------------------------------------------------------------------
# Commit phase DTOs
# ---------------------------------------------------------------------------


class CategoryRef(BaseModel):
    """One entry of the host application's live category list."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str
    name: str
    direction: Direction


class NewTransaction(BaseModel):
    """Canonical transaction entity handed to the persistence sink."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    amount: Decimal = Field(gt=0)
    direction: Direction
    category_id: str | None = None
    account_id: str | None = None
    date: datetime
    note: str = ""
    currency: str = "CNY"

    @field_validator("currency")
    @classmethod
    def _currency_code(cls, v: str) -> str:
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return code


class CommitOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    record_id: str
    ok: bool
    transaction_id: str | None = None
    error: str | None = None


class CommitReport(BaseModel):
    """Per-record results of committing a selection of imported records."""

    committed: int = 0
    failed: int = 0
    skipped: int = 0
    outcomes: list[CommitOutcome] = Field(default_factory=list)


__all__ = [
    "OTHER_CATEGORY",
    "Direction",
    "ParseWarning",
    "OutcomeKind",
    "ImportedRecord",
    "RowOutcome",
    "ImportResult",
    "CategoryRef",
    "NewTransaction",
    "CommitOutcome",
    "CommitReport",
]
