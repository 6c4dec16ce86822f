"""
In-memory repositories.

Dict-backed implementations of ContentRepoPort and ScheduleRepoPort for
local development and tests. They mirror the SQLite adapters' contracts:
stored objects are copies (callers must save() to persist mutations) and
the (content_id, action) uniqueness of schedule entries is enforced.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from src.core.entities import (
    ContentItem,
    RevisionRecord,
    ScheduleAction,
    ScheduleEntry,
    to_utc,
)


class InMemoryContentRepo:
    """In-memory content repository."""

    def __init__(self, revision_history_limit: int | None = 10) -> None:
        self.revision_history_limit = revision_history_limit
        self.items: dict[UUID, ContentItem] = {}
        self._lock = threading.Lock()

    def _retained(self, history: list[RevisionRecord]) -> list[RevisionRecord]:
        if self.revision_history_limit is None:
            return list(history)
        if self.revision_history_limit <= 0:
            return []
        return list(history[-self.revision_history_limit :])

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        with self._lock:
            item = self.items.get(item_id)
            return item.model_copy(deep=True) if item else None

    def exists(self, item_id: UUID) -> bool:
        with self._lock:
            return item_id in self.items

    def save(self, content: ContentItem) -> ContentItem:
        stored = content.model_copy(
            update={"revision_history": self._retained(content.revision_history)},
            deep=True,
        )
        with self._lock:
            self.items[stored.id] = stored
        return stored.model_copy(deep=True)

    def delete(self, item_id: UUID) -> None:
        with self._lock:
            self.items.pop(item_id, None)

    def list_with_scheduled_publish(self) -> list[ContentItem]:
        with self._lock:
            items = [i for i in self.items.values() if i.scheduled_publish is not None]
        items.sort(key=lambda i: to_utc(i.scheduled_publish or datetime.min))
        return [i.model_copy(deep=True) for i in items]


class InMemoryScheduleRepo:
    """In-memory schedule repository keyed by (content_id, action)."""

    def __init__(self) -> None:
        self.entries: dict[tuple[UUID, ScheduleAction], ScheduleEntry] = {}
        self._lock = threading.Lock()

    def list_due(self, action: ScheduleAction, now_utc: datetime) -> list[ScheduleEntry]:
        with self._lock:
            due = [
                replace(e)
                for e in self.entries.values()
                if e.action == action and e.scheduled_at <= now_utc
            ]
        return sorted(due, key=lambda e: e.scheduled_at)

    def list_all(self) -> list[ScheduleEntry]:
        with self._lock:
            return sorted((replace(e) for e in self.entries.values()), key=lambda e: e.scheduled_at)

    def find_one(self, content_id: UUID, action: ScheduleAction) -> ScheduleEntry | None:
        with self._lock:
            entry = self.entries.get((content_id, action))
            return replace(entry) if entry else None

    def list_for_content(self, content_id: UUID) -> list[ScheduleEntry]:
        with self._lock:
            return [replace(e) for (cid, _), e in self.entries.items() if cid == content_id]

    def create(self, entry: ScheduleEntry) -> ScheduleEntry:
        with self._lock:
            # Uniqueness: replace whatever held this (content_id, action)
            self.entries[(entry.content_id, entry.action)] = replace(entry)
        return entry

    def update(self, entry: ScheduleEntry) -> ScheduleEntry:
        with self._lock:
            self.entries[(entry.content_id, entry.action)] = replace(entry)
        return entry

    def delete(self, entry_id: UUID, scheduled_at: datetime | None = None) -> bool:
        with self._lock:
            for key, entry in list(self.entries.items()):
                if entry.id != entry_id:
                    continue
                if scheduled_at is not None and entry.scheduled_at != to_utc(scheduled_at):
                    return False
                del self.entries[key]
                return True
        return False

    def delete_for_content(
        self,
        content_id: UUID,
        action: ScheduleAction | None = None,
    ) -> int:
        with self._lock:
            keys = [
                key
                for key in self.entries
                if key[0] == content_id and (action is None or key[1] == action)
            ]
            for key in keys:
                del self.entries[key]
            return len(keys)
