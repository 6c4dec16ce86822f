import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

import pytest

from src.adapters.sqlite.repos import SQLiteContentRepo, SQLiteScheduleRepo
from src.app_shell import cli
from src.core.entities import ScheduleEntry
from tests.helpers import make_content

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("CMS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CMS_RULES_PATH", str(PROJECT_ROOT / "rules.yaml"))
    return tmp_path


def run_cli(monkeypatch: pytest.MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["cli", *args])
    cli.main()


def test_migrate(data_dir, monkeypatch, capsys):
    run_cli(monkeypatch, "migrate")

    assert (data_dir / "cms.db").exists()
    assert "Applied 2 migrations." in capsys.readouterr().out


def test_tick_publishes_due(data_dir, monkeypatch, capsys):
    run_cli(monkeypatch, "migrate")
    db_path = str(data_dir / "cms.db")
    item = SQLiteContentRepo(db_path).save(make_content())
    SQLiteScheduleRepo(db_path).create(
        ScheduleEntry(
            content_id=item.id,
            action="publish",
            scheduled_at=datetime.now(UTC) - timedelta(minutes=1),
        )
    )

    run_cli(monkeypatch, "tick")

    assert "1 transitioned" in capsys.readouterr().out
    assert SQLiteContentRepo(db_path).get_by_id(item.id).status == "published"


def test_backfill_and_show(data_dir, monkeypatch, capsys):
    run_cli(monkeypatch, "migrate")
    db_path = str(data_dir / "cms.db")
    when = datetime.now(UTC) + timedelta(days=1)
    item = SQLiteContentRepo(db_path).save(make_content(scheduled_publish=when))

    run_cli(monkeypatch, "backfill")
    run_cli(monkeypatch, "show", str(item.id))

    out = capsys.readouterr().out
    assert "Backfilled 1 legacy publish schedules." in out
    assert f"publish: {when.isoformat()}" in out
    assert "unpublish: -" in out


def test_show_invalid_id(data_dir, monkeypatch):
    run_cli(monkeypatch, "migrate")

    with pytest.raises(SystemExit):
        run_cli(monkeypatch, "show", "not-a-uuid")


def test_show_unknown_content(data_dir, monkeypatch, capsys):
    run_cli(monkeypatch, "migrate")
    cid = uuid4()

    run_cli(monkeypatch, "show", str(cid))

    assert f"Content {cid}" in capsys.readouterr().out
