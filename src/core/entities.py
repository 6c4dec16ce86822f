"""
Core entities for the content scheduler.

- ScheduleEntry: a pending publish/unpublish of one content item
- ScheduleAction: the transition an entry triggers when due

Content entities (ContentItem, RevisionRecord) are imported from
src.domain.entities for convenience.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

# Re-export content entities for convenience
from src.domain.entities import ContentItem, ContentStatus, RevisionRecord

__all__ = [
    # Content entities
    "ContentItem",
    "ContentStatus",
    "RevisionRecord",
    # Scheduling
    "ACTION_TARGET_STATUS",
    "SCHEDULE_ACTIONS",
    "ScheduleAction",
    "ScheduleEntry",
    "to_utc",
]


def to_utc(dt: datetime) -> datetime:
    """Normalize to aware UTC. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


# --- Schedule Actions ---

ScheduleAction = Literal["publish", "unpublish"]

SCHEDULE_ACTIONS: tuple[ScheduleAction, ...] = ("publish", "unpublish")

# Status each action moves content into
ACTION_TARGET_STATUS: dict[ScheduleAction, ContentStatus] = {
    "publish": "published",
    "unpublish": "draft",
}


# --- ScheduleEntry ---


@dataclass(frozen=False)
class ScheduleEntry:
    """
    Scheduled publish/unpublish of a content item.

    Invariants:
    - at most one entry per (content_id, action)
    - scheduled_at is timezone-aware UTC
    """

    content_id: UUID
    action: ScheduleAction
    scheduled_at: datetime
    # Fields with defaults must follow non-default fields
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    note: str = ""

    def __post_init__(self) -> None:
        self.scheduled_at = to_utc(self.scheduled_at)
        self.created_at = to_utc(self.created_at)
