import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, HTTPException, Request, status

from src.adapters.sqlite.repos import SQLiteContentRepo
from src.components.content import ContentService
from src.components.scheduler import ScheduleManager, SchedulerEngine
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("CMS_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "cms.db")
        self.rules_path = Path(os.environ.get("CMS_RULES_PATH", self.base_dir / "rules.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


# --- Repos ---
def get_content_repo(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> SQLiteContentRepo:
    return SQLiteContentRepo(
        settings.db_path,
        revision_history_limit=rules.content.revision_history_limit,
    )


# --- Scheduler ---
# The engine and manager are process singletons built in the lifespan
# handler; they live on app.state so every request shares one index.
def get_scheduler_engine(request: Request) -> SchedulerEngine:
    engine = getattr(request.app.state, "scheduler_engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scheduler not initialised",
        )
    return engine


def get_schedule_manager(request: Request) -> ScheduleManager:
    manager = getattr(request.app.state, "schedule_manager", None)
    if manager is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scheduler not initialised",
        )
    return manager


# --- Services ---
def get_content_service(
    repo: SQLiteContentRepo = Depends(get_content_repo),
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> ContentService:
    return ContentService(repo=repo, manager=manager)
