"""
ScheduleIndex - in-memory mirror of pending schedule entries.

Answers "does content X have a pending schedule for action A, and when"
without a store round-trip. The Schedule Store stays authoritative; the
index is rebuilt from it whenever the engine starts.

Request handlers and the scheduler thread both touch the index, so the
maps are guarded by a lock.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from src.core.entities import SCHEDULE_ACTIONS, ScheduleAction, ScheduleEntry, to_utc

from .models import IndexEntry


class ScheduleIndex:
    """Per-action map of content_id -> IndexEntry."""

    def __init__(self) -> None:
        self._items: dict[ScheduleAction, dict[UUID, IndexEntry]] = {
            action: {} for action in SCHEDULE_ACTIONS
        }
        self._lock = threading.RLock()

    def clear(self) -> None:
        with self._lock:
            for items in self._items.values():
                items.clear()

    def load(self, entries: Iterable[ScheduleEntry]) -> int:
        """Add entries to the index. Returns the number loaded."""
        count = 0
        with self._lock:
            for entry in entries:
                self.put(entry)
                count += 1
        return count

    def put(self, entry: ScheduleEntry) -> None:
        with self._lock:
            self._items[entry.action][entry.content_id] = IndexEntry(
                schedule_entry_id=entry.id,
                scheduled_at=entry.scheduled_at,
            )

    def get(self, content_id: UUID, action: ScheduleAction) -> IndexEntry | None:
        with self._lock:
            return self._items[action].get(content_id)

    def contains(self, content_id: UUID, action: ScheduleAction) -> bool:
        return self.get(content_id, action) is not None

    def remove(
        self,
        content_id: UUID,
        action: ScheduleAction,
        entry_id: UUID | None = None,
        scheduled_at: datetime | None = None,
    ) -> bool:
        """
        Drop the (action, content_id) entry.

        When entry_id (and scheduled_at) are given, only an entry for that
        schedule at that time is removed, so a schedule replaced or moved
        meanwhile survives.
        """
        with self._lock:
            current = self._items[action].get(content_id)
            if current is None:
                return False
            if entry_id is not None and current.schedule_entry_id != entry_id:
                return False
            if scheduled_at is not None and current.scheduled_at != to_utc(scheduled_at):
                return False
            del self._items[action][content_id]
            return True

    def remove_content(self, content_id: UUID) -> None:
        with self._lock:
            for items in self._items.values():
                items.pop(content_id, None)

    def count(self, action: ScheduleAction | None = None) -> int:
        with self._lock:
            if action is not None:
                return len(self._items[action])
            return sum(len(items) for items in self._items.values())

    def snapshot(self) -> dict[ScheduleAction, dict[UUID, IndexEntry]]:
        """Copy of the current index."""
        with self._lock:
            return {action: dict(items) for action, items in self._items.items()}
