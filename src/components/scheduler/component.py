"""
Scheduler component - content publish/unpublish scheduling.

Functional entry points over ScheduleManager and SchedulerEngine for
callers that want result objects instead of exceptions (HTTP routes,
CLI).

Invariants:
- at most one schedule per (content_id, action)
- scheduled times are strictly in the future
- a due schedule is applied at most once per tick and then removed
- ticks never overlap and never raise
"""

from __future__ import annotations

from src.core.ports.jobs import (
    InvalidScheduleError,
    NotFoundError,
    ScheduleError,
    TickResult,
    TransientStoreError,
)

from ._engine import SchedulerEngine
from ._impl import ScheduleManager
from .models import (
    ContentScheduleOutput,
    GetScheduleInput,
    RemoveOutput,
    RemoveScheduleInput,
    ScheduleContentInput,
    ScheduleOutput,
    SchedulerValidationError,
    UpdateScheduleInput,
)


def _convert_error(error: ScheduleError) -> SchedulerValidationError:
    """Convert a scheduling exception to a component error."""
    if isinstance(error, InvalidScheduleError):
        return SchedulerValidationError(code=error.code, message=str(error))
    if isinstance(error, NotFoundError):
        return SchedulerValidationError(
            code="content_not_found",
            message=str(error),
            content_id=error.content_id,
        )
    if isinstance(error, TransientStoreError):
        return SchedulerValidationError(code="store_unavailable", message=str(error))
    return SchedulerValidationError(code="schedule_error", message=str(error))


# --- Component Entry Points ---


def run_schedule(
    inp: ScheduleContentInput,
    *,
    manager: ScheduleManager,
) -> ScheduleOutput:
    """
    Schedule content, replacing any existing schedule for the action.

    Args:
        inp: Content, time, action and optional note.
        manager: Schedule manager.

    Returns:
        ScheduleOutput with the entry or errors.
    """
    try:
        entry = manager.schedule_content(
            inp.content_id, inp.scheduled_at, inp.action, note=inp.note
        )
    except ScheduleError as e:
        return ScheduleOutput(entry=None, errors=[_convert_error(e)], success=False)
    return ScheduleOutput(entry=entry)


def run_update(
    inp: UpdateScheduleInput,
    *,
    manager: ScheduleManager,
) -> ScheduleOutput:
    """
    Move an existing schedule (same ID) or create it.

    Args:
        inp: Content, new time, action and optional note.
        manager: Schedule manager.

    Returns:
        ScheduleOutput with the entry or errors.
    """
    try:
        entry = manager.update_schedule(
            inp.content_id, inp.scheduled_at, inp.action, note=inp.note
        )
    except ScheduleError as e:
        return ScheduleOutput(entry=None, errors=[_convert_error(e)], success=False)
    return ScheduleOutput(entry=entry)


def run_remove(
    inp: RemoveScheduleInput,
    *,
    manager: ScheduleManager,
) -> RemoveOutput:
    """
    Cancel one schedule, or both when no action is given.

    Removing a schedule that does not exist is not an error.
    """
    try:
        if inp.action is None:
            removed = manager.remove_all_schedules(inp.content_id)
        else:
            removed = int(manager.remove_schedule(inp.content_id, inp.action))
    except ScheduleError as e:
        return RemoveOutput(removed=0, errors=[_convert_error(e)], success=False)
    return RemoveOutput(removed=removed)


def run_get_schedule(
    inp: GetScheduleInput,
    *,
    manager: ScheduleManager,
) -> ContentScheduleOutput:
    """Read the publish/unpublish schedules of a content item."""
    try:
        schedule = manager.get_content_schedule(inp.content_id)
    except ScheduleError as e:
        return ContentScheduleOutput(schedule=None, errors=[_convert_error(e)], success=False)
    return ContentScheduleOutput(schedule=schedule)


def run_tick(*, engine: SchedulerEngine) -> TickResult:
    """Process due schedules now."""
    return engine.trigger_now()


def run(
    inp: (
        ScheduleContentInput
        | UpdateScheduleInput
        | RemoveScheduleInput
        | GetScheduleInput
    ),
    *,
    manager: ScheduleManager,
) -> ScheduleOutput | RemoveOutput | ContentScheduleOutput:
    """
    Main entry point for the scheduler component.

    Dispatches to appropriate handler based on input type.
    """
    if isinstance(inp, ScheduleContentInput):
        return run_schedule(inp, manager=manager)
    elif isinstance(inp, UpdateScheduleInput):
        return run_update(inp, manager=manager)
    elif isinstance(inp, RemoveScheduleInput):
        return run_remove(inp, manager=manager)
    elif isinstance(inp, GetScheduleInput):
        return run_get_schedule(inp, manager=manager)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
