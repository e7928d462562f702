"""Turn the user's selection of imported records into ledger transactions.

The committer resolves categories against the host's live category list and
hands one :class:`~bill_import.models.NewTransaction` per selected record to
a persistence sink. It does not touch account balances; that belongs to the
host application.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from .logging_setup import get_logger
from .models import (
    OTHER_CATEGORY,
    CategoryRef,
    CommitOutcome,
    CommitReport,
    Direction,
    ImportedRecord,
    NewTransaction,
)

logger = get_logger("bill_import.committer")


class TransactionSink(Protocol):
    """Persistence collaborator.

    ``insert`` returns the stored transaction's id and raises on failure.
    """

    def insert(self, transaction: NewTransaction) -> str: ...


def resolve_category_id(
    categories: Sequence[CategoryRef],
    name: str,
    direction: Direction,
    *,
    fallback_name: str = OTHER_CATEGORY,
) -> str | None:
    """Find a category id by exact ``(name, direction)``.

    Falls back to the direction's ``fallback_name`` category, then ``None``.
    """

    for cat in categories:
        if cat.name == name and cat.direction == direction:
            return cat.id
    for cat in categories:
        if cat.name == fallback_name and cat.direction == direction:
            return cat.id
    return None


def build_transaction(
    record: ImportedRecord,
    categories: Sequence[CategoryRef],
    default_account_id: str | None,
    *,
    currency: str = "CNY",
) -> NewTransaction:
    return NewTransaction(
        amount=record.amount,
        direction=record.direction,
        category_id=resolve_category_id(categories, record.category, record.direction),
        account_id=default_account_id,
        date=record.date,
        note=record.note,
        currency=currency,
    )


def commit_records(
    records: Iterable[ImportedRecord],
    categories: Sequence[CategoryRef],
    default_account_id: str | None,
    sink: TransactionSink,
    *,
    currency: str = "CNY",
) -> CommitReport:
    """Persist every selected record through ``sink``.

    Parameters
    ----------
    records:
        Imported records, typically ``ImportResult.records`` after the user
        toggled ``selected``. Unselected records are counted as skipped.
    categories:
        The host's live category list.
    default_account_id:
        Account assigned to every created transaction (may be ``None``).
    sink:
        Persistence collaborator; each ``insert`` is one logical write.
    currency:
        Currency code recorded on each transaction. Amounts are stored at
        face value; no conversion happens here.

    Returns
    -------
    CommitReport
        One outcome per selected record. A failing insert is recorded and the
        remaining records are still attempted.
    """

    report = CommitReport()
    for record in records:
        if not record.selected:
            report.skipped += 1
            continue
        try:
            tx = build_transaction(record, categories, default_account_id, currency=currency)
            tx_id = sink.insert(tx)
        except Exception as e:
            logger.warning("commit failed for record %s: %s", record.id, e)
            report.failed += 1
            report.outcomes.append(CommitOutcome(record_id=record.id, ok=False, error=str(e)))
            continue
        report.committed += 1
        report.outcomes.append(CommitOutcome(record_id=record.id, ok=True, transaction_id=tx_id))

    logger.info(
        "committed %d records (%d failed, %d skipped)",
        report.committed,
        report.failed,
        report.skipped,
    )
    return report


__all__ = [
    "TransactionSink",
    "resolve_category_id",
    "build_transaction",
    "commit_records",
]
