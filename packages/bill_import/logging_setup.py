"""Logging configuration shared by every ``bill_import`` module.

Library code only ever does::

    logger = get_logger("bill_import.<module>")

and leaves output to whoever embeds it. Entry points (the CLI) call
:func:`configure_logging` once; until then the package logger carries a
``NullHandler`` and stays silent.

Levels, by convention: per-file parse summaries at INFO, a missing header row
at WARNING, per-row rejections and exclusions at DEBUG, commit failures at
WARNING.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "bill_import"
_LEVEL_ENV_VAR = "BILL_IMPORT_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def resolve_level(level: int | str | None = None) -> int:
    """Turn an int, a level name or a numeric string into a logging level.

    ``None`` reads ``BILL_IMPORT_LOG_LEVEL``; unknown names and an unset
    variable both give ``logging.INFO``.
    """

    if level is None:
        level = os.getenv(_LEVEL_ENV_VAR)
    if isinstance(level, int):
        return level
    if level:
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        value = logging.getLevelName(name)
        if isinstance(value, int):
            return value
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Attach one ``StreamHandler`` to the ``bill_import`` logger.

    Only the first call has an effect. ``stream`` defaults to the
    ``sys.stderr`` current at call time. Records do not propagate to the root
    logger, so host applications that configure the root see no duplicates.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]:
        pkg_logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    handler.setLevel(resolved)

    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolved)
    pkg_logger.propagate = False
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level"]
