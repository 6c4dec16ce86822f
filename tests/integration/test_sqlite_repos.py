from datetime import UTC, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from src.adapters.sqlite.repos import SQLiteContentRepo, SQLiteScheduleRepo
from src.core.entities import RevisionRecord, ScheduleEntry
from src.core.ports.jobs import TransientStoreError
from tests.helpers import make_content

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def content_repo(db_path):
    return SQLiteContentRepo(db_path)


@pytest.fixture
def schedule_repo(db_path):
    return SQLiteScheduleRepo(db_path)


def _entry(content_id=None, action="publish", when=NOW, **kwargs) -> ScheduleEntry:
    return ScheduleEntry(
        content_id=content_id or uuid4(), action=action, scheduled_at=when, **kwargs
    )


class TestContentRepo:
    def test_save_and_get(self, content_repo):
        item = make_content(
            status="published",
            published_at=NOW,
            author_id=uuid4(),
            revision_history=[RevisionRecord(changed_at=NOW, changes="Created")],
        )

        content_repo.save(item)
        fetched = content_repo.get_by_id(item.id)

        assert fetched is not None
        assert fetched.slug == item.slug
        assert fetched.status == "published"
        assert fetched.published_at == NOW
        assert fetched.author_id == item.author_id
        assert [r.changes for r in fetched.revision_history] == ["Created"]

    def test_upsert(self, content_repo):
        item = content_repo.save(make_content(title="Old"))

        content_repo.save(item.model_copy(update={"title": "New"}))

        assert content_repo.get_by_id(item.id).title == "New"

    def test_revision_history_is_capped(self, db_path):
        repo = SQLiteContentRepo(db_path, revision_history_limit=3)
        history = [
            RevisionRecord(changed_at=NOW + timedelta(minutes=i), changes=f"r{i}")
            for i in range(5)
        ]

        saved = repo.save(make_content(revision_history=history))

        assert [r.changes for r in saved.revision_history] == ["r2", "r3", "r4"]
        assert [r.changes for r in repo.get_by_id(saved.id).revision_history] == [
            "r2",
            "r3",
            "r4",
        ]

    def test_unbounded_history(self, db_path):
        repo = SQLiteContentRepo(db_path, revision_history_limit=None)
        history = [RevisionRecord(changed_at=NOW, changes=f"r{i}") for i in range(15)]

        saved = repo.save(make_content(revision_history=history))

        assert len(repo.get_by_id(saved.id).revision_history) == 15

    def test_exists_and_delete(self, content_repo):
        item = content_repo.save(make_content())
        assert content_repo.exists(item.id)

        content_repo.delete(item.id)

        assert not content_repo.exists(item.id)
        assert content_repo.get_by_id(item.id) is None

    def test_duplicate_slug_is_value_error(self, content_repo):
        content_repo.save(make_content(slug="same"))

        with pytest.raises(ValueError):
            content_repo.save(make_content(slug="same"))

    def test_list_with_scheduled_publish(self, content_repo):
        later = content_repo.save(make_content(scheduled_publish=NOW + timedelta(days=2)))
        sooner = content_repo.save(make_content(scheduled_publish=NOW + timedelta(days=1)))
        content_repo.save(make_content())

        items = content_repo.list_with_scheduled_publish()

        assert [i.id for i in items] == [sooner.id, later.id]


class TestScheduleRepo:
    def test_create_and_find(self, schedule_repo):
        entry = schedule_repo.create(_entry(note="hello"))

        found = schedule_repo.find_one(entry.content_id, "publish")

        assert found.id == entry.id
        assert found.scheduled_at == NOW
        assert found.note == "hello"
        assert schedule_repo.find_one(entry.content_id, "unpublish") is None

    def test_create_replaces_pair(self, schedule_repo):
        first = schedule_repo.create(_entry())
        second = schedule_repo.create(
            _entry(content_id=first.content_id, when=NOW + timedelta(hours=1))
        )

        entries = schedule_repo.list_for_content(first.content_id)

        assert [e.id for e in entries] == [second.id]

    def test_list_due_boundaries(self, schedule_repo):
        past = schedule_repo.create(_entry(when=NOW - timedelta(hours=1)))
        exact = schedule_repo.create(_entry(when=NOW))
        schedule_repo.create(_entry(when=NOW + timedelta(hours=1)))
        schedule_repo.create(_entry(action="unpublish", when=NOW - timedelta(hours=2)))

        due = schedule_repo.list_due("publish", NOW)

        assert [e.id for e in due] == [past.id, exact.id]

    def test_list_due_compares_instants(self, schedule_repo):
        entry = schedule_repo.create(_entry(when=NOW))
        plus_two = NOW.astimezone(timezone(timedelta(hours=2)))

        assert [e.id for e in schedule_repo.list_due("publish", plus_two)] == [entry.id]

    def test_update_keeps_id(self, schedule_repo):
        entry = schedule_repo.create(_entry())
        entry.scheduled_at = NOW + timedelta(days=1)
        entry.note = "moved"

        schedule_repo.update(entry)

        found = schedule_repo.find_one(entry.content_id, "publish")
        assert found.id == entry.id
        assert found.scheduled_at == NOW + timedelta(days=1)
        assert found.note == "moved"

    def test_update_recreates_consumed_row(self, schedule_repo):
        entry = _entry()

        schedule_repo.update(entry)

        assert schedule_repo.find_one(entry.content_id, "publish").id == entry.id

    def test_delete_and_delete_for_content(self, schedule_repo):
        cid = uuid4()
        pub = schedule_repo.create(_entry(content_id=cid))
        schedule_repo.create(_entry(content_id=cid, action="unpublish"))

        schedule_repo.delete(pub.id)
        schedule_repo.delete(uuid4())

        assert [e.action for e in schedule_repo.list_for_content(cid)] == ["unpublish"]
        assert schedule_repo.delete_for_content(cid, "publish") == 0
        assert schedule_repo.delete_for_content(cid) == 1
        assert schedule_repo.list_all() == []

    def test_delete_with_time_skips_moved_entry(self, schedule_repo):
        entry = schedule_repo.create(_entry())
        moved = schedule_repo.update(
            ScheduleEntry(
                id=entry.id,
                content_id=entry.content_id,
                action="publish",
                scheduled_at=NOW + timedelta(days=1),
            )
        )

        assert schedule_repo.delete(entry.id, scheduled_at=NOW) is False
        assert schedule_repo.find_one(entry.content_id, "publish").id == moved.id
        assert schedule_repo.delete(entry.id, scheduled_at=moved.scheduled_at) is True
        assert schedule_repo.list_all() == []

    def test_missing_table_is_transient_error(self, tmp_path):
        repo = SQLiteScheduleRepo(str(tmp_path / "empty.db"))

        with pytest.raises(TransientStoreError):
            repo.list_all()
