"""
Scheduler component - scheduled publish/unpublish of content.
"""

from __future__ import annotations

from ._engine import AUTO_TRANSITION_NOTES, SchedulerEngine, needs_transition
from ._impl import (
    DEFAULT_CONFIG,
    SchedulerConfig,
    ScheduleManager,
    build_config,
    validate_action,
)
from ._index import ScheduleIndex
from .component import (
    run,
    run_get_schedule,
    run_remove,
    run_schedule,
    run_tick,
    run_update,
)
from .models import (
    ContentSchedule,
    ContentScheduleOutput,
    GetScheduleInput,
    IndexEntry,
    RemoveOutput,
    RemoveScheduleInput,
    ScheduleContentInput,
    ScheduleInfo,
    ScheduleOutput,
    SchedulerValidationError,
    UpdateScheduleInput,
)
from .ports import ContentRepoPort, ScheduleRepoPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_get_schedule",
    "run_remove",
    "run_schedule",
    "run_tick",
    "run_update",
    # Services
    "AUTO_TRANSITION_NOTES",
    "DEFAULT_CONFIG",
    "ScheduleIndex",
    "ScheduleManager",
    "SchedulerConfig",
    "SchedulerEngine",
    "build_config",
    "create_scheduler",
    "needs_transition",
    "validate_action",
    # Input models
    "GetScheduleInput",
    "RemoveScheduleInput",
    "ScheduleContentInput",
    "UpdateScheduleInput",
    # Output models
    "ContentSchedule",
    "ContentScheduleOutput",
    "IndexEntry",
    "RemoveOutput",
    "ScheduleInfo",
    "ScheduleOutput",
    "SchedulerValidationError",
    # Ports
    "ContentRepoPort",
    "ScheduleRepoPort",
    "TimePort",
]


# --- Factory ---


def create_scheduler(
    content_repo: ContentRepoPort,
    schedule_repo: ScheduleRepoPort,
    time_port: TimePort | None = None,
    config: SchedulerConfig | None = None,
) -> tuple[SchedulerEngine, ScheduleManager]:
    """
    Create an engine and the manager that shares its index.

    Construct once per process and hand the manager to the editing flow.
    """
    engine = SchedulerEngine(
        content_repo=content_repo,
        schedule_repo=schedule_repo,
        time_port=time_port,
        config=config,
    )
    manager = ScheduleManager(
        content_repo=content_repo,
        schedule_repo=schedule_repo,
        index=engine.index,
        time_port=time_port,
    )
    return engine, manager
