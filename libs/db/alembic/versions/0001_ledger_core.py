# ruff: noqa: I001
"""Ledger core tables and default categories.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


# Mirrors bill_import.persistence.DEFAULT_CATEGORIES
_DEFAULT_CATEGORIES: tuple[tuple[str, str, str], ...] = (
    ("餐饮", "expense", "fork.knife"),
    ("交通", "expense", "car.fill"),
    ("购物", "expense", "cart.fill"),
    ("娱乐", "expense", "gamecontroller.fill"),
    ("医疗", "expense", "cross.case.fill"),
    ("教育", "expense", "book.fill"),
    ("住房", "expense", "house.fill"),
    ("通讯", "expense", "phone.fill"),
    ("Other", "expense", "ellipsis.circle.fill"),
    ("工资", "income", "banknote.fill"),
    ("奖金", "income", "gift.fill"),
    ("投资", "income", "chart.line.uptrend.xyaxis"),
    ("Other", "income", "ellipsis.circle.fill"),
)


def upgrade() -> None:
    op.create_table(
        "ledger_categories",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("direction", sa.String(16), nullable=False),
        sa.Column("icon_name", sa.String(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("name", "direction", name="uq_ledger_categories_name_direction"),
        sa.CheckConstraint(
            "direction in ('expense','income')", name="ck_ledger_categories_direction"
        ),
    )

    op.bulk_insert(
        sa.table(
            "ledger_categories",
            sa.column("id", sa.String()),
            sa.column("name", sa.String()),
            sa.column("direction", sa.String()),
            sa.column("icon_name", sa.String()),
            sa.column("sort_order", sa.Integer()),
        ),
        [
            {
                "id": uuid.uuid4().hex,
                "name": name,
                "direction": direction,
                "icon_name": icon,
                "sort_order": i,
            }
            for i, (name, direction, icon) in enumerate(_DEFAULT_CATEGORIES)
        ],
    )

    op.create_table(
        "ledger_transactions",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("direction", sa.String(16), nullable=False),
        sa.Column(
            "category_id",
            sa.String(32),
            sa.ForeignKey("ledger_categories.id"),
            nullable=True,
        ),
        sa.Column("account_id", sa.String(), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("note", sa.Text(), nullable=False, server_default=""),
        sa.Column("currency", sa.CHAR(3), nullable=False, server_default="CNY"),
        sa.Column("source", sa.String(), nullable=False, server_default="manual"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("amount > 0", name="ck_ledger_tx_amount_positive"),
        sa.CheckConstraint("direction in ('expense','income')", name="ck_ledger_tx_direction"),
    )
    op.create_index("ix_ledger_tx_date", "ledger_transactions", ["date"])
    op.create_index("ix_ledger_tx_account", "ledger_transactions", ["account_id"])


def downgrade() -> None:
    op.drop_index("ix_ledger_tx_account", table_name="ledger_transactions")
    op.drop_index("ix_ledger_tx_date", table_name="ledger_transactions")
    op.drop_table("ledger_transactions")
    op.drop_table("ledger_categories")
