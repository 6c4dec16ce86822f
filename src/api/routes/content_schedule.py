"""
Content Scheduling API Routes.

Schedule, reschedule, inspect and cancel the publish/unpublish schedules
of a content item. Mounted under /api/content.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.deps import get_schedule_manager
from src.api.schemas import (
    ContentScheduleResponse,
    ScheduleEntryResponse,
    ScheduleRequest,
)
from src.components.scheduler import (
    GetScheduleInput,
    RemoveScheduleInput,
    ScheduleContentInput,
    ScheduleManager,
    SchedulerValidationError,
    UpdateScheduleInput,
    run_get_schedule,
    run_remove,
    run_schedule,
    run_update,
)
from src.core.entities import ScheduleEntry

router = APIRouter()

_ERROR_STATUS = {
    "content_not_found": status.HTTP_404_NOT_FOUND,
    "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}


# --- Helpers ---


def entry_to_response(entry: ScheduleEntry) -> ScheduleEntryResponse:
    return ScheduleEntryResponse(
        id=entry.id,
        content_id=entry.content_id,
        action=entry.action,
        scheduled_at=entry.scheduled_at,
        created_at=entry.created_at,
        note=entry.note,
    )


def _serialize_errors(errors: list[SchedulerValidationError]) -> list[dict[str, Any]]:
    """Serialize errors for JSON response."""
    return [
        {
            "code": e.code,
            "message": e.message,
            "content_id": str(e.content_id) if e.content_id else None,
        }
        for e in errors
    ]


def raise_for_errors(errors: list[SchedulerValidationError]) -> None:
    """Raise HTTPException for component errors; validation maps to 400."""
    if not errors:
        return
    code = _ERROR_STATUS.get(errors[0].code, status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=code, detail={"errors": _serialize_errors(errors)})


# --- Routes ---


@router.post(
    "/{content_id}/schedule",
    response_model=ScheduleEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
def schedule_content(
    content_id: UUID,
    request: ScheduleRequest,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> Any:
    """Schedule a publish or unpublish, replacing any existing one."""
    result = run_schedule(
        ScheduleContentInput(
            content_id=content_id,
            scheduled_at=request.date,
            action=request.action,
            note=request.note or "",
        ),
        manager=manager,
    )
    raise_for_errors(result.errors)
    if result.entry is None:
        raise HTTPException(status_code=500, detail="Failed to create schedule")
    return entry_to_response(result.entry)


@router.put("/{content_id}/schedule", response_model=ScheduleEntryResponse)
def update_schedule(
    content_id: UUID,
    request: ScheduleRequest,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> Any:
    """Move an existing schedule to a new time (or create it)."""
    result = run_update(
        UpdateScheduleInput(
            content_id=content_id,
            scheduled_at=request.date,
            action=request.action,
            note=request.note,
        ),
        manager=manager,
    )
    raise_for_errors(result.errors)
    if result.entry is None:
        raise HTTPException(status_code=500, detail="Failed to update schedule")
    return entry_to_response(result.entry)


@router.get("/{content_id}/schedule", response_model=ContentScheduleResponse)
def get_content_schedule(
    content_id: UUID,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> Any:
    """Get the pending publish/unpublish schedules of a content item."""
    result = run_get_schedule(GetScheduleInput(content_id=content_id), manager=manager)
    raise_for_errors(result.errors)
    if result.schedule is None:
        raise HTTPException(status_code=500, detail="Failed to read schedule")
    return result.schedule.to_dict()


@router.delete("/{content_id}/schedule")
def remove_schedule(
    content_id: UUID,
    action: str | None = None,
    manager: ScheduleManager = Depends(get_schedule_manager),
) -> dict[str, Any]:
    """Cancel one schedule, or both when no action is given."""
    result = run_remove(
        RemoveScheduleInput(content_id=content_id, action=action),
        manager=manager,
    )
    raise_for_errors(result.errors)
    return {
        "success": True,
        "content_id": str(content_id),
        "action": action,
        "removed": result.removed,
    }
