"""
Application startup/shutdown with the real SQLite stack.
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.adapters.sqlite.repos import SQLiteContentRepo
from src.api.deps import get_rules, get_settings
from src.api.main import app
from tests.helpers import make_content

RULES = """
project:
  slug: test
  rules_version: "1.0"
  required_sections: [project, scheduler]
scheduler:
  tick_interval_seconds: 3600
  autostart: {autostart}
  backfill_legacy_on_start: true
"""


@pytest.fixture
def env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    def _configure(autostart: bool = True) -> Path:
        rules_path = tmp_path / "rules.yaml"
        rules_path.write_text(RULES.format(autostart=str(autostart).lower()))
        monkeypatch.setenv("CMS_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("CMS_RULES_PATH", str(rules_path))
        get_settings.cache_clear()
        get_rules.cache_clear()
        return tmp_path / "data"

    yield _configure
    get_settings.cache_clear()
    get_rules.cache_clear()


def test_startup_migrates_and_starts_scheduler(env):
    data_dir = env()

    with TestClient(app) as client:
        health = client.get("/health").json()
        assert health["scheduler_running"] is True
        assert (data_dir / "cms.db").exists()

        created = client.post(
            "/api/content",
            json={
                "title": "Hello",
                "slug": "hello",
                "publish_at": (datetime.now(UTC) + timedelta(hours=1)).isoformat(),
            },
        )
        assert created.status_code == 201
        content_id = created.json()["id"]

        schedule = client.get(f"/api/content/{content_id}/schedule").json()
        assert schedule["publish"] is not None
        assert client.get("/api/schedule/pending").json()["total_count"] == 1

    assert app.state.scheduler_engine.is_running is False


def test_startup_backfills_legacy_schedules(env):
    data_dir = env(autostart=False)

    # First start creates the schema
    with TestClient(app):
        pass

    db_path = str(data_dir / "cms.db")
    item = SQLiteContentRepo(db_path).save(
        make_content(scheduled_publish=datetime.now(UTC) - timedelta(minutes=1))
    )

    with TestClient(app) as client:
        assert client.get("/health").json()["scheduler_running"] is False
        pending = client.get("/api/schedule/pending").json()
        assert pending["total_count"] == 1

        tick = client.post("/api/schedule/tick").json()
        assert tick["transitioned"] == 1

    assert SQLiteContentRepo(db_path).get_by_id(item.id).status == "published"
