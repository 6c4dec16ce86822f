"""
Database Adapter Interfaces.

Protocol-based interfaces for repository operations.
Implementations: SQLite (src/adapters/sqlite), in-memory (src/adapters/memory).
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.core.entities import ContentItem, ScheduleAction, ScheduleEntry

# -----------------------------------------------------------------------------
# Content Repository
# -----------------------------------------------------------------------------


class ContentRepoPort(Protocol):
    """
    Repository for content items.

    State machine: draft <-> published, draft|published -> archived

    Revision history retention is a property of the store: save() keeps
    only the most recent records when a limit is configured.
    """

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        """Get content by ID."""
        ...

    def exists(self, item_id: UUID) -> bool:
        """Check whether content exists."""
        ...

    def save(self, content: ContentItem) -> ContentItem:
        """Save or update content (upsert), including revision history."""
        ...

    def delete(self, item_id: UUID) -> None:
        """Delete content by ID."""
        ...

    def list_with_scheduled_publish(self) -> list[ContentItem]:
        """List content whose legacy scheduled_publish field is set."""
        ...


# -----------------------------------------------------------------------------
# Schedule Repository
# -----------------------------------------------------------------------------


class ScheduleRepoPort(Protocol):
    """
    Repository for schedule entries.

    Invariants:
    - at most one entry per (content_id, action); create() replaces
    """

    def list_due(self, action: ScheduleAction, now_utc: datetime) -> list[ScheduleEntry]:
        """List entries for action with scheduled_at <= now_utc."""
        ...

    def list_all(self) -> list[ScheduleEntry]:
        """List every persisted entry."""
        ...

    def find_one(self, content_id: UUID, action: ScheduleAction) -> ScheduleEntry | None:
        """Get the entry for (content_id, action)."""
        ...

    def list_for_content(self, content_id: UUID) -> list[ScheduleEntry]:
        """List all entries for a content item."""
        ...

    def create(self, entry: ScheduleEntry) -> ScheduleEntry:
        """Insert entry, replacing any existing (content_id, action) entry."""
        ...

    def update(self, entry: ScheduleEntry) -> ScheduleEntry:
        """Update scheduled_at/note of an existing entry (same ID)."""
        ...

    def delete(self, entry_id: UUID, scheduled_at: datetime | None = None) -> bool:
        """
        Delete entry by ID. Missing IDs are ignored.

        When scheduled_at is given the entry is only deleted if it still
        holds that time, so an entry moved meanwhile survives. Returns
        whether a row was deleted.
        """
        ...

    def delete_for_content(
        self,
        content_id: UUID,
        action: ScheduleAction | None = None,
    ) -> int:
        """Delete entries for content (one action or all). Returns count."""
        ...
