import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from src.core.entities import (
    ContentItem,
    RevisionRecord,
    ScheduleAction,
    ScheduleEntry,
    to_utc,
)
from src.core.ports.jobs import TransientStoreError


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _iso(dt: datetime | None) -> str | None:
    # Fixed-width so that string comparison in SQL matches time order
    return to_utc(dt).isoformat(timespec="microseconds") if dt else None


def parse_dt(s: str | None) -> datetime | None:
    return to_utc(datetime.fromisoformat(s)) if s else None


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate sqlite errors. Constraint violations become ValueError."""
    try:
        yield
    except sqlite3.IntegrityError as e:
        raise ValueError(f"{operation} conflict: {e}") from e
    except sqlite3.Error as e:
        raise TransientStoreError(f"{operation} failed: {e}") from e


class SQLiteContentRepo:
    def __init__(self, db_path: str, revision_history_limit: int | None = 10):
        self.db_path = db_path
        self.revision_history_limit = revision_history_limit

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _retained(self, history: list[RevisionRecord]) -> list[RevisionRecord]:
        if self.revision_history_limit is None:
            return list(history)
        if self.revision_history_limit <= 0:
            return []
        return list(history[-self.revision_history_limit :])

    def save(self, item: ContentItem) -> ContentItem:
        history = self._retained(item.revision_history)
        with store_errors("content save"):
            conn = self._get_conn()
            try:
                # 1. Upsert ContentItem
                conn.execute(
                    """
                    INSERT INTO content_items (
                        id, slug, title, body, status,
                        published_at, scheduled_publish, author_id,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        slug=excluded.slug,
                        title=excluded.title,
                        body=excluded.body,
                        status=excluded.status,
                        published_at=excluded.published_at,
                        scheduled_publish=excluded.scheduled_publish,
                        author_id=excluded.author_id,
                        updated_at=excluded.updated_at
                """,
                    (
                        str(item.id),
                        item.slug,
                        item.title,
                        item.body,
                        item.status,
                        _iso(item.published_at),
                        _iso(item.scheduled_publish),
                        str(item.author_id) if item.author_id else None,
                        _iso(item.created_at),
                        _iso(item.updated_at),
                    ),
                )

                # 2. Replace revision history with the retained tail
                conn.execute(
                    "DELETE FROM content_revision_history WHERE content_item_id = ?",
                    (str(item.id),),
                )
                for i, record in enumerate(history):
                    conn.execute(
                        """
                        INSERT INTO content_revision_history
                        (content_item_id, position, changed_at, changes, editor_id)
                        VALUES (?, ?, ?, ?, ?)
                    """,
                        (
                            str(item.id),
                            i,
                            _iso(record.changed_at),
                            record.changes,
                            str(record.editor_id) if record.editor_id else None,
                        ),
                    )

                conn.commit()
                return item.model_copy(update={"revision_history": history})
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        with store_errors("content get"):
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT * FROM content_items WHERE id = ?", (str(item_id),)
                ).fetchone()
                if not row:
                    return None

                history_rows = conn.execute(
                    "SELECT * FROM content_revision_history "
                    "WHERE content_item_id = ? ORDER BY position ASC",
                    (str(item_id),),
                ).fetchall()
                return self._map_row(row, history_rows)
            finally:
                conn.close()

    def exists(self, item_id: UUID) -> bool:
        with store_errors("content exists"):
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT 1 AS found FROM content_items WHERE id = ?", (str(item_id),)
                ).fetchone()
                return row is not None
            finally:
                conn.close()

    def delete(self, item_id: UUID) -> None:
        with store_errors("content delete"):
            conn = self._get_conn()
            try:
                # Delete history first (handles DBs without ON DELETE CASCADE)
                conn.execute(
                    "DELETE FROM content_revision_history WHERE content_item_id = ?",
                    (str(item_id),),
                )
                conn.execute("DELETE FROM content_items WHERE id = ?", (str(item_id),))
                conn.commit()
            finally:
                conn.close()

    def list_with_scheduled_publish(self) -> list[ContentItem]:
        with store_errors("content list"):
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    "SELECT id FROM content_items WHERE scheduled_publish IS NOT NULL "
                    "ORDER BY scheduled_publish ASC"
                ).fetchall()
            finally:
                conn.close()

        items = []
        for row in rows:
            item = self.get_by_id(UUID(row["id"]))
            if item:
                items.append(item)
        return items

    def _map_row(
        self, row: dict[str, Any], history_rows: list[dict[str, Any]]
    ) -> ContentItem:
        history = [
            RevisionRecord(
                changed_at=parse_dt(h["changed_at"]) or datetime.min.replace(tzinfo=UTC),
                changes=h["changes"],
                editor_id=UUID(h["editor_id"]) if h["editor_id"] else None,
            )
            for h in history_rows
        ]
        return ContentItem(
            id=UUID(row["id"]),
            slug=row["slug"],
            title=row["title"],
            body=row["body"],
            status=row["status"],
            published_at=parse_dt(row["published_at"]),
            scheduled_publish=parse_dt(row["scheduled_publish"]),
            author_id=UUID(row["author_id"]) if row["author_id"] else None,
            revision_history=history,
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )


class SQLiteScheduleRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _map_row(self, row: dict[str, Any]) -> ScheduleEntry:
        return ScheduleEntry(
            id=UUID(row["id"]),
            content_id=UUID(row["content_id"]),
            action=row["action"],
            scheduled_at=datetime.fromisoformat(row["scheduled_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            note=row["note"] or "",
        )

    def _fetch(self, operation: str, query: str, params: tuple[Any, ...]) -> list[ScheduleEntry]:
        with store_errors(operation):
            conn = self._get_conn()
            try:
                rows = conn.execute(query, params).fetchall()
                return [self._map_row(r) for r in rows]
            finally:
                conn.close()

    def list_due(self, action: ScheduleAction, now_utc: datetime) -> list[ScheduleEntry]:
        return self._fetch(
            "schedule due query",
            """
            SELECT * FROM content_schedules
            WHERE action = ? AND scheduled_at <= ?
            ORDER BY scheduled_at ASC
            """,
            (action, _iso(now_utc)),
        )

    def list_all(self) -> list[ScheduleEntry]:
        return self._fetch(
            "schedule list",
            "SELECT * FROM content_schedules ORDER BY scheduled_at ASC",
            (),
        )

    def find_one(self, content_id: UUID, action: ScheduleAction) -> ScheduleEntry | None:
        rows = self._fetch(
            "schedule lookup",
            "SELECT * FROM content_schedules WHERE content_id = ? AND action = ?",
            (str(content_id), action),
        )
        return rows[0] if rows else None

    def list_for_content(self, content_id: UUID) -> list[ScheduleEntry]:
        return self._fetch(
            "schedule list",
            "SELECT * FROM content_schedules WHERE content_id = ? ORDER BY action ASC",
            (str(content_id),),
        )

    def create(self, entry: ScheduleEntry) -> ScheduleEntry:
        with store_errors("schedule create"):
            conn = self._get_conn()
            try:
                # UNIQUE(content_id, action): a conflicting row is replaced
                conn.execute(
                    """
                    INSERT OR REPLACE INTO content_schedules (
                        id, content_id, action, scheduled_at, created_at, note
                    ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                    (
                        str(entry.id),
                        str(entry.content_id),
                        entry.action,
                        _iso(entry.scheduled_at),
                        _iso(entry.created_at),
                        entry.note,
                    ),
                )
                conn.commit()
                return entry
            finally:
                conn.close()

    def update(self, entry: ScheduleEntry) -> ScheduleEntry:
        with store_errors("schedule update"):
            conn = self._get_conn()
            try:
                cursor = conn.execute(
                    "UPDATE content_schedules SET scheduled_at = ?, note = ? WHERE id = ?",
                    (_iso(entry.scheduled_at), entry.note, str(entry.id)),
                )
                conn.commit()
                updated = cursor.rowcount
            finally:
                conn.close()

        if updated == 0:
            # Row vanished (consumed by a tick); write it back
            return self.create(entry)
        return entry

    def delete(self, entry_id: UUID, scheduled_at: datetime | None = None) -> bool:
        with store_errors("schedule delete"):
            conn = self._get_conn()
            try:
                if scheduled_at is None:
                    cursor = conn.execute(
                        "DELETE FROM content_schedules WHERE id = ?", (str(entry_id),)
                    )
                else:
                    cursor = conn.execute(
                        "DELETE FROM content_schedules WHERE id = ? AND scheduled_at = ?",
                        (str(entry_id), _iso(scheduled_at)),
                    )
                conn.commit()
                return cursor.rowcount > 0
            finally:
                conn.close()

    def delete_for_content(
        self,
        content_id: UUID,
        action: ScheduleAction | None = None,
    ) -> int:
        with store_errors("schedule delete"):
            conn = self._get_conn()
            try:
                if action is None:
                    cursor = conn.execute(
                        "DELETE FROM content_schedules WHERE content_id = ?",
                        (str(content_id),),
                    )
                else:
                    cursor = conn.execute(
                        "DELETE FROM content_schedules WHERE content_id = ? AND action = ?",
                        (str(content_id), action),
                    )
                conn.commit()
                return cursor.rowcount
            finally:
                conn.close()
