import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteContentRepo, SQLiteScheduleRepo
from src.api.deps import get_rules, get_settings
from src.app_shell.config import validate_ops_rules
from src.components.scheduler import build_config, create_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules, validate and migrate on startup (fail-fast)
    try:
        rules = get_rules(settings)
        validate_ops_rules(rules, settings.data_dir)
        SQLiteMigrator(settings.db_path).run_migrations()
        logger.info("Rules loaded from %s", settings.rules_path)
    except Exception:
        logger.critical("Startup failed", exc_info=True)
        sys.exit(1)

    engine, manager = create_scheduler(
        content_repo=SQLiteContentRepo(
            settings.db_path,
            revision_history_limit=rules.content.revision_history_limit,
        ),
        schedule_repo=SQLiteScheduleRepo(settings.db_path),
        time_port=SystemClock(),
        config=build_config(rules.scheduler),
    )
    app.state.scheduler_engine = engine
    app.state.schedule_manager = manager

    if rules.scheduler.backfill_legacy_on_start:
        manager.backfill_legacy_schedules()
    if rules.scheduler.autostart:
        engine.start()
    else:
        engine.reload_index()

    yield

    engine.stop()


app = FastAPI(
    title="Content Scheduler API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import (  # noqa: E402
    content,
    content_schedule,
    schedule_admin,
)

app.include_router(content.router, prefix="/api/content", tags=["Content"])
app.include_router(content_schedule.router, prefix="/api/content", tags=["Content Schedule"])
app.include_router(schedule_admin.router, prefix="/api/schedule", tags=["Schedule Admin"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    engine = getattr(app.state, "scheduler_engine", None)
    return {
        "status": "ok",
        "service": "api",
        "scheduler_running": bool(engine and engine.is_running),
    }
