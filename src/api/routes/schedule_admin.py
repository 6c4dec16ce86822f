"""
Scheduler Admin API Routes.

Pending-schedule overview served from the Schedule Index and a manual
tick trigger. Mounted under /api/schedule.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from src.api.deps import get_scheduler_engine
from src.api.schemas import (
    EntryResultResponse,
    PendingEntryResponse,
    PendingResponse,
    TickResponse,
)
from src.components.scheduler import SchedulerEngine, run_tick

router = APIRouter()


@router.get("/pending", response_model=PendingResponse)
def list_pending(
    engine: SchedulerEngine = Depends(get_scheduler_engine),
) -> Any:
    """List pending schedules, soonest first."""
    items = [
        PendingEntryResponse(
            content_id=content_id,
            action=action,
            schedule_entry_id=entry.schedule_entry_id,
            scheduled_at=entry.scheduled_at,
        )
        for action, entries in engine.index.snapshot().items()
        for content_id, entry in entries.items()
    ]
    items.sort(key=lambda i: i.scheduled_at)
    return PendingResponse(total_count=len(items), items=items)


@router.post("/tick", response_model=TickResponse)
def trigger_tick(
    engine: SchedulerEngine = Depends(get_scheduler_engine),
) -> Any:
    """Process due schedules now instead of waiting for the timer."""
    result = run_tick(engine=engine)
    return TickResponse(
        ran=result.ran,
        total_processed=result.total_processed,
        transitioned=result.transitioned,
        skipped=result.skipped,
        orphaned=result.orphaned,
        failed=result.failed,
        error=result.error,
        results=[
            EntryResultResponse(
                outcome=r.outcome.value,
                entry_id=r.entry_id,
                content_id=r.content_id,
                action=r.action,
                message=r.message,
                error=r.error,
            )
            for r in result.results
        ],
    )
