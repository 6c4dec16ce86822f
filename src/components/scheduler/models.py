"""
Scheduler component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from src.core.entities import ScheduleEntry

# --- Validation Error ---


@dataclass(frozen=True)
class SchedulerValidationError:
    """Scheduler validation error."""

    code: str
    message: str
    content_id: UUID | None = None


# --- Index Model ---


@dataclass(frozen=True)
class IndexEntry:
    """In-memory mirror of a pending schedule entry."""

    schedule_entry_id: UUID
    scheduled_at: datetime


# --- Schedule Read Model ---


@dataclass(frozen=True)
class ScheduleInfo:
    """Pending schedule for one action."""

    scheduled_at: datetime
    created_at: datetime
    note: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "scheduled_at": self.scheduled_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "note": self.note,
        }


@dataclass(frozen=True)
class ContentSchedule:
    """Publish/unpublish schedules of a content item."""

    content_id: UUID
    publish: ScheduleInfo | None = None
    unpublish: ScheduleInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content_id": str(self.content_id),
            "publish": self.publish.to_dict() if self.publish else None,
            "unpublish": self.unpublish.to_dict() if self.unpublish else None,
        }


# --- Input Models ---


@dataclass(frozen=True)
class ScheduleContentInput:
    """Input for scheduling (replacing any existing schedule)."""

    content_id: UUID
    scheduled_at: datetime
    action: str
    note: str = ""


@dataclass(frozen=True)
class UpdateScheduleInput:
    """Input for moving an existing schedule (or creating one)."""

    content_id: UUID
    scheduled_at: datetime
    action: str
    note: str | None = None


@dataclass(frozen=True)
class RemoveScheduleInput:
    """Input for cancelling schedules. action=None removes both."""

    content_id: UUID
    action: str | None = None


@dataclass(frozen=True)
class GetScheduleInput:
    """Input for reading a content item's schedules."""

    content_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class ScheduleOutput:
    """Output for schedule/update operations."""

    entry: ScheduleEntry | None
    errors: list[SchedulerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RemoveOutput:
    """Output for remove operations."""

    removed: int
    errors: list[SchedulerValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ContentScheduleOutput:
    """Output for get schedule operation."""

    schedule: ContentSchedule | None
    errors: list[SchedulerValidationError] = field(default_factory=list)
    success: bool = True
