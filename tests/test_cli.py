import json
from pathlib import Path

from db.client import reset_engine, session_scope
from db.models.ledger import LedgerTransaction
from sqlalchemy import select
from typer.testing import CliRunner

from bill_import.cli import app
from tests.helpers.sqlite_db import bootstrap_sqlite_db

runner = CliRunner()

ALIPAY = (
    "支付宝交易记录明细查询\n"
    "交易时间,交易分类,交易对方,商品说明,收/支,金额,收/付款方式,交易状态\n"
    "2024-03-01 12:30:00,餐饮美食,某某餐厅,午餐,支出,¥88.50,余额宝,交易成功\n"
    "2024-03-02 09:00:00,转账红包,张三,红包,收入,200.00,余额,交易成功\n"
    "2024-03-03 10:00:00,日用百货,超市,日用品,支出,35.00,花呗,交易关闭\n"
)


def _write(tmp_path: Path, text: str, name: str = "bill.csv") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_sources_lists_every_identifier():
    result = runner.invoke(app, ["sources"])
    assert result.exit_code == 0, result.output
    for ident in ("alipay", "wechat", "qianji", "suishouji", "moze", "generic"):
        assert ident in result.output


def test_parse_prints_summary(tmp_path: Path):
    path = _write(tmp_path, ALIPAY)

    result = runner.invoke(app, ["parse", "--file", str(path), "--source", "alipay"])

    assert result.exit_code == 0, result.output
    assert "parsed: 2  failed: 0  excluded: 1  duplicates: 0" in result.output


def test_parse_json(tmp_path: Path):
    path = _write(tmp_path, ALIPAY)

    result = runner.invoke(app, ["parse", "--file", str(path), "--source", "alipay", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["source"] == "alipay"
    assert payload["success_count"] == 2
    assert payload["excluded_count"] == 1
    assert payload["header_found"] is True
    first = payload["records"][0]
    assert first["amount"] == "88.50"
    assert first["direction"] == "expense"
    assert first["category"] == "餐饮"
    assert first["date"] == "2024-03-01T12:30:00"


def test_parse_without_records_fails(tmp_path: Path):
    path = _write(tmp_path, "Date,Amount\nnot-a-date,10\n")

    result = runner.invoke(app, ["parse", "--file", str(path)])

    assert result.exit_code == 1
    assert "row 2: cannot parse date: not-a-date" in result.output
    assert "no valid rows found" in result.output


def test_parse_unknown_source(tmp_path: Path):
    path = _write(tmp_path, ALIPAY)

    result = runner.invoke(app, ["parse", "--file", str(path), "--source", "paypal"])

    assert result.exit_code == 1
    assert "unknown source" in result.output


def test_parse_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["parse", "--file", str(tmp_path / "missing.csv")])
    assert result.exit_code == 1
    assert "cannot read" in result.output


def test_commit_writes_selected_rows(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "ledger.sqlite3")
    path = _write(tmp_path, ALIPAY)

    result = runner.invoke(
        app,
        [
            "commit",
            "--file",
            str(path),
            "--source",
            "alipay",
            "--database-url",
            url,
            "--account-id",
            "acct-1",
            "--skip-row",
            "2",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "committed: 1  failed: 0  skipped: 1" in result.output
    with session_scope(database_url=url) as session:
        rows = session.scalars(select(LedgerTransaction)).all()
        assert [(r.note, r.account_id, r.source) for r in rows] == [
            ("某某餐厅 - 午餐", "acct-1", "import:alipay")
        ]


def test_commit_uses_default_account_from_env(tmp_path: Path, monkeypatch):
    url = bootstrap_sqlite_db(tmp_path / "ledger.sqlite3")
    path = _write(tmp_path, ALIPAY)
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("BILL_IMPORT_DEFAULT_ACCOUNT", "wallet")

    result = runner.invoke(app, ["commit", "--file", str(path), "--source", "alipay"])

    assert result.exit_code == 0, result.output
    with session_scope(database_url=url) as session:
        accounts = {r.account_id for r in session.scalars(select(LedgerTransaction))}
    assert accounts == {"wallet"}


def test_commit_rejects_out_of_range_skip_row(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "ledger.sqlite3")
    path = _write(tmp_path, ALIPAY)

    result = runner.invoke(
        app,
        ["commit", "--file", str(path), "--source", "alipay", "--database-url", url]
        + ["--skip-row", "9"],
    )

    assert result.exit_code == 1
    assert "out of range" in result.output


def test_init_db_creates_and_seeds(tmp_path: Path):
    url = f"sqlite+pysqlite:///{tmp_path / 'fresh.sqlite3'}"

    first = runner.invoke(app, ["init-db", "--database-url", url])
    assert first.exit_code == 0, first.output
    assert "seeded 13 categories" in first.output

    reset_engine()
    second = runner.invoke(app, ["init-db", "--database-url", url])
    assert second.exit_code == 0, second.output
    assert "seeded 0 categories" in second.output
