"""SQL-backed collaborators for the import committer.

Writes go to the shared ledger database owned by ``libs/db``, through the
SQLAlchemy ORM models in ``db.models.ledger`` and sessions from ``db.client``.

Scope:
- ``SqlTransactionSink``: one ``ledger_transactions`` row per committed record.
- ``load_live_categories``: read the category list the committer matches
  against.
- ``seed_default_categories``: install the default category set.

Callers own the transaction scope (``db.client.session_scope``).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from db.models.ledger import LedgerCategory, LedgerTransaction
from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import OTHER_CATEGORY, CategoryRef, Direction, NewTransaction

# (name, direction, icon). Mirrored in libs/db/alembic/versions/0001_ledger_core.py
DEFAULT_CATEGORIES: tuple[tuple[str, Direction, str], ...] = (
    ("餐饮", Direction.EXPENSE, "fork.knife"),
    ("交通", Direction.EXPENSE, "car.fill"),
    ("购物", Direction.EXPENSE, "cart.fill"),
    ("娱乐", Direction.EXPENSE, "gamecontroller.fill"),
    ("医疗", Direction.EXPENSE, "cross.case.fill"),
    ("教育", Direction.EXPENSE, "book.fill"),
    ("住房", Direction.EXPENSE, "house.fill"),
    ("通讯", Direction.EXPENSE, "phone.fill"),
    (OTHER_CATEGORY, Direction.EXPENSE, "ellipsis.circle.fill"),
    ("工资", Direction.INCOME, "banknote.fill"),
    ("奖金", Direction.INCOME, "gift.fill"),
    ("投资", Direction.INCOME, "chart.line.uptrend.xyaxis"),
    (OTHER_CATEGORY, Direction.INCOME, "ellipsis.circle.fill"),
)


def _to_decimal_2(d: Decimal) -> Decimal:
    return d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class SqlTransactionSink:
    """Persistence sink inserting into ``ledger_transactions``.

    Each insert runs inside a SAVEPOINT so that one failing row leaves the
    surrounding session usable for the remaining records.
    """

    def __init__(self, session: Session, *, source: str = "import") -> None:
        self._session = session
        self._source = source

    def insert(self, transaction: NewTransaction) -> str:
        row = LedgerTransaction(
            amount=_to_decimal_2(transaction.amount),
            direction=transaction.direction.value,
            category_id=transaction.category_id,
            account_id=transaction.account_id,
            date=transaction.date,
            note=transaction.note,
            currency=transaction.currency,
            source=self._source,
        )
        with self._session.begin_nested():
            self._session.add(row)
            self._session.flush()
        return row.id


def load_live_categories(session: Session) -> list[CategoryRef]:
    """Return the ledger's categories as committer-friendly refs."""

    rows = session.execute(
        select(LedgerCategory).order_by(
            LedgerCategory.direction, LedgerCategory.sort_order, LedgerCategory.name
        )
    ).scalars()
    return [CategoryRef(id=r.id, name=r.name, direction=Direction(r.direction)) for r in rows]


def seed_default_categories(session: Session) -> int:
    """Insert any missing default categories; return how many were added."""

    existing = {
        (name, direction)
        for name, direction in session.execute(
            select(LedgerCategory.name, LedgerCategory.direction)
        ).all()
    }
    added = 0
    for order, (name, direction, icon) in enumerate(DEFAULT_CATEGORIES):
        if (name, direction.value) in existing:
            continue
        session.add(
            LedgerCategory(name=name, direction=direction.value, icon_name=icon, sort_order=order)
        )
        added += 1
    session.flush()
    return added


__all__ = [
    "DEFAULT_CATEGORIES",
    "SqlTransactionSink",
    "load_live_categories",
    "seed_default_categories",
]
