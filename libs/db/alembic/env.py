# ruff: noqa: I001
"""Alembic environment for the ledger schema.

The target URL is resolved in this order: ``DATABASE_URL`` from the process
environment, ``DATABASE_URL`` from the nearest ``.env`` (searched upward from
the working directory), then ``sqlalchemy.url`` in ``alembic.ini``. SQLite
targets run in batch mode so column changes work despite SQLite's limited
``ALTER TABLE``.
"""

from __future__ import annotations

import logging
import os
from logging.config import fileConfig

from alembic import context
from dotenv import find_dotenv, load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url

import db

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = db.metadata


def _resolve_url() -> str:
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)
    url = os.getenv("DATABASE_URL") or config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError(
            "no database configured: set DATABASE_URL (environment or .env) "
            "or sqlalchemy.url in alembic.ini"
        )
    return url


def _configure_kwargs(url: str) -> dict[str, object]:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": make_url(url).get_backend_name() == "sqlite",
    }


def run_migrations_offline(url: str) -> None:
    context.configure(url=url, literal_binds=True, **_configure_kwargs(url))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(url: str) -> None:
    section = dict(config.get_section(config.config_ini_section) or {})
    section["sqlalchemy.url"] = url
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs(url))
        with context.begin_transaction():
            context.run_migrations()


_url = _resolve_url()
if context.is_offline_mode():
    run_migrations_offline(_url)
else:
    # Host part only; the URL may carry credentials.
    logger.info("migrating ledger schema at %s", _url.rsplit("@", 1)[-1])
    run_migrations_online(_url)
