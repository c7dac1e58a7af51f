"""
Command line entry point.
"""
import json
import logging
from datetime import timedelta

import pytest

from campaign_engine import cli
from campaign_engine.core.config import Config

from conftest import NOW


def _db_url(db_service):
    return db_service.engine.url.render_as_string(hide_password=False)


def test_init_db_creates_schema(tmp_path):
    url = f"sqlite:///{tmp_path / 'fresh.db'}"
    assert cli.main(["--database-url", url, "init-db"]) == 0
    assert (tmp_path / "fresh.db").exists()


def test_run_prints_summary(db_service, make_rule, make_item, capsys, monkeypatch):
    monkeypatch.setattr(Config.engine, "LOCK_BACKEND", "local")
    make_rule(name="CLI rule")
    make_item(100)

    code = cli.main(["--database-url", _db_url(db_service), "run", "--now", NOW.isoformat()])

    assert code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["itemsUpdated"] == 1
    assert body["logs"][0]["ruleName"] == "CLI rule"


def test_audit_report_to_csv(db_service, make_rule, make_item, tmp_path, monkeypatch):
    monkeypatch.setattr(Config.engine, "LOCK_BACKEND", "local")
    make_rule()
    make_item(100)
    url = _db_url(db_service)
    cli.main(["--database-url", url, "run", "--now", NOW.isoformat()])

    out = tmp_path / "report.csv"
    assert cli.main(["--database-url", url, "audit-report", "--csv", str(out)]) == 0
    assert out.read_text().splitlines()[0].startswith("rule_id,rule_name,changes")


def test_invalid_lock_backend_is_fatal(db_service, monkeypatch):
    monkeypatch.setattr(Config.engine, "LOCK_BACKEND", "zookeeper")
    assert cli.main(["--database-url", _db_url(db_service), "run"]) == 2


def test_init_db_reports_unreachable_database(tmp_path):
    url = f"sqlite:///{tmp_path / 'missing-dir' / 'x.db'}"
    assert cli.main(["--database-url", url, "init-db"]) == 1


def test_now_with_offset_is_converted_to_utc(db_service, make_rule, make_item, capsys, monkeypatch):
    monkeypatch.setattr(Config.engine, "LOCK_BACKEND", "local")
    make_rule(start_date=NOW + timedelta(minutes=30))
    make_item(100)

    # 11:00 UTC; the rule starts at 12:30 UTC
    code = cli.main(["--database-url", _db_url(db_service), "run", "--now", "2026-03-15T17:00:00+06:00"])

    assert code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["rulesProcessed"] == 0
    assert body["itemsUpdated"] == 0


def test_quiet_only_logs_errors(tmp_path):
    url = f"sqlite:///{tmp_path / 'quiet.db'}"
    assert cli.main(["-q", "--database-url", url, "init-db"]) == 0
    assert logging.getLogger("campaign_engine").level == logging.ERROR


def test_quiet_and_verbose_are_exclusive(tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli.main(["-q", "-v", "--database-url", f"sqlite:///{tmp_path / 'x.db'}", "init-db"])
    assert exc.value.code == 2
