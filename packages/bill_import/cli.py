# ruff: noqa: I001
"""CLI for the ``bill_import`` package.

A Typer console interface over :mod:`bill_import.api`. Environment variables
(``DATABASE_URL``, ``BILL_IMPORT_LOG_LEVEL``, ``BILL_IMPORT_DEFAULT_ACCOUNT``)
are loaded from a local ``.env`` using ``python-dotenv`` before any command
runs. Parsing and committing live in ``bill_import.api`` and
``bill_import.committer``; this module only renders results.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.models import OptionInfo

from .api import commit_records, parse_bill_file
from .errors import BillImportError
from .logging_setup import configure_logging
from .models import ImportResult, ImportedRecord
from .sources import ImportSource

console = Console()
err_console = Console(stderr=True)


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    return typer.Exit(1)


def _load(file: Path, source: str | None) -> ImportResult:
    try:
        return parse_bill_file(file, source)
    except BillImportError as e:
        raise _fail(str(e)) from e


def _record_json(r: ImportedRecord) -> dict[str, object]:
    return {
        "id": r.id,
        "date": r.date.isoformat(),
        "amount": str(r.amount),
        "direction": r.direction.value,
        "category": r.category,
        "note": r.note,
        "selected": r.selected,
    }


def _result_json(result: ImportResult) -> str:
    payload = {
        "source": result.source,
        "success_count": result.success_count,
        "failed_count": result.failed_count,
        "duplicate_count": result.duplicate_count,
        "excluded_count": result.excluded_count,
        "header_found": result.header_found,
        "warnings": [w.value for w in result.warnings],
        "errors": list(result.errors),
        "records": [_record_json(r) for r in result.records],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _preview_table(result: ImportResult) -> Table:
    title = f"{ImportSource(result.source).display_name}: {result.success_count} records"
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Date")
    table.add_column("Direction")
    table.add_column("Amount", justify="right")
    table.add_column("Category")
    table.add_column("Note", overflow="fold")
    for i, r in enumerate(result.records, start=1):
        table.add_row(
            str(i),
            r.date.strftime("%Y-%m-%d %H:%M"),
            r.direction.value,
            f"{r.amount:.2f}",
            r.category,
            r.note,
        )
    return table


def _print_summary(result: ImportResult) -> None:
    console.print(
        f"parsed: {result.success_count}  failed: {result.failed_count}  "
        f"excluded: {result.excluded_count}  duplicates: {result.duplicate_count}",
        highlight=False,
    )
    if not result.header_found:
        console.print("[yellow]Warning:[/yellow] header row not found; assumed first line")
    for line in result.errors:
        console.print(f"  [red]{escape(line)}[/red]", highlight=False)


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
FILE_OPTION: OptionInfo = typer.Option(
    ...,
    "--file",
    help="Path to the exported bill (UTF-8 CSV).",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports unreadable files itself
)
SOURCE_OPTION: OptionInfo = typer.Option(
    ...,
    "--source",
    help="Source app identifier (see `sources`); omitted means generic CSV.",
)


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bills exported from Chinese/English finance apps. "
        "Loads DATABASE_URL from a local .env before running."
    ),
)


@app.command("sources")
def sources_cmd() -> None:
    """List the supported export sources."""

    table = Table(title="Supported sources")
    table.add_column("Identifier")
    table.add_column("Name")
    table.add_column("Icon")
    table.add_column("Color")
    for src in ImportSource:
        info = src.info
        table.add_row(src.value, info.display_name, info.icon_name, info.icon_color)
    console.print(table)


@app.command("parse")
def parse_cmd(
    file: Annotated[Path, FILE_OPTION],
    source: Annotated[str | None, SOURCE_OPTION] = None,
    *,
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Parse an export and preview the records it yields."""

    result = _load(file, source)

    if as_json:
        typer.echo(_result_json(result))
    else:
        if result.records:
            console.print(_preview_table(result))
        _print_summary(result)

    if not result.records:
        raise _fail("no valid rows found, check file format")


@app.command("commit")
def commit_cmd(
    file: Annotated[Path, FILE_OPTION],
    source: Annotated[str | None, SOURCE_OPTION] = None,
    *,
    account_id: str | None = typer.Option(
        None,
        "--account-id",
        help="Account for created transactions (falls back to BILL_IMPORT_DEFAULT_ACCOUNT).",
    ),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    skip_row: list[int] = typer.Option(
        [],
        "--skip-row",
        help="Preview row number (#) to leave out; may be repeated.",
    ),
    currency: str = typer.Option("CNY", help="Currency code recorded on each transaction."),
) -> None:
    """Parse an export and write the selected records to the ledger."""

    # Deferred imports keep `parse`/`sources` usable without a database
    from db.client import session_scope

    from .persistence import SqlTransactionSink, load_live_categories

    result = _load(file, source)
    if not result.records:
        _print_summary(result)
        raise _fail("no valid rows found, check file format")

    for n in skip_row:
        if not 1 <= n <= len(result.records):
            raise _fail(f"--skip-row {n} is out of range (1..{len(result.records)})")
        result.records[n - 1].selected = False

    account = account_id or os.getenv("BILL_IMPORT_DEFAULT_ACCOUNT") or None

    try:
        with session_scope(database_url=database_url) as session:
            categories = load_live_categories(session)
            sink = SqlTransactionSink(session, source=f"import:{result.source}")
            report = commit_records(
                result.records, categories, account, sink, currency=currency
            )
    except Exception as e:
        raise _fail(f"commit failed: {e}") from e

    console.print(
        f"committed: {report.committed}  failed: {report.failed}  skipped: {report.skipped}",
        highlight=False,
    )
    for outcome in report.outcomes:
        if not outcome.ok:
            detail = escape(outcome.error or "")
            console.print(f"  [red]{outcome.record_id}: {detail}[/red]", highlight=False)
    if report.failed:
        raise typer.Exit(1)


@app.command("init-db")
def init_db_cmd(
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Create the ledger tables (when missing) and seed default categories.

    Intended for local SQLite ledgers; managed databases should run the
    Alembic migrations under ``libs/db`` instead.
    """

    from db.client import create_schema, session_scope

    from .persistence import seed_default_categories

    try:
        create_schema(database_url=database_url)
        with session_scope(database_url=database_url) as session:
            added = seed_default_categories(session)
    except Exception as e:
        raise _fail(f"database initialization failed: {e}") from e
    console.print(f"seeded {added} categories", highlight=False)


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m bill_import.cli`
    app()
