from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.memory.repos import InMemoryContentRepo, InMemoryScheduleRepo
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.components.scheduler import (
    ScheduleManager,
    SchedulerConfig,
    SchedulerEngine,
    create_scheduler,
)
from src.core.entities import ContentItem
from tests.helpers import FrozenClock, make_content

PROJECT_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def clock(now: datetime) -> FrozenClock:
    return FrozenClock(now)


@pytest.fixture
def content_repo() -> InMemoryContentRepo:
    return InMemoryContentRepo()


@pytest.fixture
def schedule_repo() -> InMemoryScheduleRepo:
    return InMemoryScheduleRepo()


@pytest.fixture
def scheduler(
    content_repo: InMemoryContentRepo,
    schedule_repo: InMemoryScheduleRepo,
    clock: FrozenClock,
) -> tuple[SchedulerEngine, ScheduleManager]:
    return create_scheduler(
        content_repo=content_repo,
        schedule_repo=schedule_repo,
        time_port=clock,
        config=SchedulerConfig(tick_interval_seconds=0.05, stop_timeout_seconds=2.0),
    )


@pytest.fixture
def engine(scheduler: tuple[SchedulerEngine, ScheduleManager]) -> SchedulerEngine:
    eng = scheduler[0]
    yield eng
    eng.stop()


@pytest.fixture
def manager(scheduler: tuple[SchedulerEngine, ScheduleManager]) -> ScheduleManager:
    return scheduler[1]


@pytest.fixture
def draft(content_repo: InMemoryContentRepo) -> ContentItem:
    return content_repo.save(make_content())


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Migrated SQLite database in a temp dir."""
    path = str(tmp_path / "cms.db")
    SQLiteMigrator(path, PROJECT_ROOT / "migrations").run_migrations()
    return path


@pytest.fixture
def rules_path() -> Path:
    return PROJECT_ROOT / "rules.yaml"
