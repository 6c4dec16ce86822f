"""
Tests for ScheduleIndex.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from src.components.scheduler import ScheduleIndex
from src.core.entities import ScheduleEntry

WHEN = datetime(2030, 1, 1, 9, 0, tzinfo=UTC)


def _entry(action: str = "publish", content_id=None, when: datetime = WHEN) -> ScheduleEntry:
    return ScheduleEntry(content_id=content_id or uuid4(), action=action, scheduled_at=when)


class TestPutAndGet:
    def test_put_then_get(self) -> None:
        index = ScheduleIndex()
        entry = _entry()

        index.put(entry)

        found = index.get(entry.content_id, "publish")
        assert found is not None
        assert found.schedule_entry_id == entry.id
        assert found.scheduled_at == WHEN
        assert index.contains(entry.content_id, "publish")
        assert not index.contains(entry.content_id, "unpublish")

    def test_put_replaces_same_pair(self) -> None:
        index = ScheduleIndex()
        first = _entry()
        second = _entry(content_id=first.content_id, when=WHEN + timedelta(days=1))

        index.put(first)
        index.put(second)

        assert index.count() == 1
        assert index.get(first.content_id, "publish").schedule_entry_id == second.id

    def test_actions_are_independent(self) -> None:
        index = ScheduleIndex()
        cid = uuid4()
        index.put(_entry("publish", cid))
        index.put(_entry("unpublish", cid))

        assert index.count() == 2
        assert index.count("publish") == 1
        assert index.count("unpublish") == 1


class TestRemove:
    def test_remove_pair(self) -> None:
        index = ScheduleIndex()
        entry = _entry()
        index.put(entry)

        assert index.remove(entry.content_id, "publish") is True
        assert index.get(entry.content_id, "publish") is None

    def test_remove_missing_is_false(self) -> None:
        assert ScheduleIndex().remove(uuid4(), "publish") is False

    def test_remove_with_stale_entry_id_keeps_newer(self) -> None:
        index = ScheduleIndex()
        old = _entry()
        new = _entry(content_id=old.content_id)
        index.put(new)

        assert index.remove(old.content_id, "publish", entry_id=old.id) is False
        assert index.get(old.content_id, "publish").schedule_entry_id == new.id

    def test_remove_with_old_time_keeps_moved_entry(self) -> None:
        index = ScheduleIndex()
        entry = _entry()
        index.put(_entry(content_id=entry.content_id, when=WHEN + timedelta(days=1)))
        moved = index.get(entry.content_id, "publish")

        assert index.remove(entry.content_id, "publish", scheduled_at=WHEN) is False
        assert index.get(entry.content_id, "publish") == moved

    def test_remove_content_drops_both(self) -> None:
        index = ScheduleIndex()
        cid = uuid4()
        other = _entry()
        index.put(_entry("publish", cid))
        index.put(_entry("unpublish", cid))
        index.put(other)

        index.remove_content(cid)

        assert index.count() == 1
        assert index.contains(other.content_id, "publish")


class TestLoad:
    def test_load_counts(self) -> None:
        index = ScheduleIndex()
        assert index.load([_entry(), _entry(), _entry("unpublish")]) == 3
        assert index.count() == 3

    def test_clear(self) -> None:
        index = ScheduleIndex()
        index.load([_entry(), _entry("unpublish")])

        index.clear()

        assert index.count() == 0

    def test_snapshot_is_a_copy(self) -> None:
        index = ScheduleIndex()
        entry = _entry()
        index.put(entry)

        snap = index.snapshot()
        snap["publish"].clear()

        assert index.contains(entry.content_id, "publish")
