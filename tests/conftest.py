"""Pytest configuration for test isolation.

The ``db`` client keeps a process-wide engine bound to the first
``DATABASE_URL`` it sees, the CLI reads ``.env`` from the working directory,
and ``configure_logging`` binds a handler to whatever stderr is current when
it runs (``CliRunner`` swaps in a temporary one). All of these leak state
between tests, so every test starts with a fresh engine, a scrubbed
environment, an unconfigured package logger and its own working directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import reset_engine

from bill_import import logging_setup

_ENV_VARS = ("DATABASE_URL", "BILL_IMPORT_LOG_LEVEL", "BILL_IMPORT_DEFAULT_ACCOUNT")


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # No stray .env from the checkout may be picked up by the CLI callback.
    monkeypatch.chdir(tmp_path)
    reset_engine()
    yield
    reset_engine()


@pytest.fixture(autouse=True)
def pkg_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[logging.Logger]:
    logger = logging.getLogger("bill_import")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
