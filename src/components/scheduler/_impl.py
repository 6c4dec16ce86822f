"""
ScheduleManager - the only writer of schedule entries.

Creates, moves, cancels and reads publish/unpublish schedules for the
content-editing flow, keeping the Schedule Store and the Schedule Index
consistent with each other.

Key behaviors:
- At most one entry per (content_id, action); scheduling again replaces
- Scheduled times must be strictly in the future
- Reads of a content item's schedule go to the store (read-your-writes)
- "Is X scheduled" lookups are served from the index
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from src.core.entities import SCHEDULE_ACTIONS, ScheduleAction, ScheduleEntry, to_utc
from src.core.ports.jobs import InvalidScheduleError, NotFoundError

from ._index import ScheduleIndex
from .models import ContentSchedule, IndexEntry, ScheduleInfo

if TYPE_CHECKING:
    from src.core.ports.db import ContentRepoPort, ScheduleRepoPort
    from src.core.ports.time import TimePort
    from src.rules.models import SchedulerRules

logger = logging.getLogger(__name__)

LEGACY_BACKFILL_NOTE = "Migrated from scheduled_publish"


# --- Configuration ---


@dataclass(frozen=True)
class SchedulerConfig:
    """Scheduler configuration from rules."""

    # Timing
    tick_interval_seconds: float = 60.0
    stop_timeout_seconds: float = 5.0

    # Content lifecycle
    clear_published_at_on_unpublish: bool = False


DEFAULT_CONFIG = SchedulerConfig()


def build_config(rules: SchedulerRules | None) -> SchedulerConfig:
    """Build scheduler config from the rules file section."""
    if rules is None:
        return DEFAULT_CONFIG

    return SchedulerConfig(
        tick_interval_seconds=rules.tick_interval_seconds,
        stop_timeout_seconds=rules.stop_timeout_seconds,
        clear_published_at_on_unpublish=rules.clear_published_at_on_unpublish,
    )


def validate_action(action: str) -> ScheduleAction:
    """Return action as a ScheduleAction or raise InvalidScheduleError."""
    if action not in SCHEDULE_ACTIONS:
        raise InvalidScheduleError(
            'Action must be either "publish" or "unpublish"',
            code="invalid_action",
        )
    return action  # type: ignore[return-value]


# --- ScheduleManager ---


class ScheduleManager:
    """
    Schedule Manager API.

    Wraps every Schedule Store mutation together with the matching
    Schedule Index update.
    """

    def __init__(
        self,
        content_repo: ContentRepoPort,
        schedule_repo: ScheduleRepoPort,
        index: ScheduleIndex,
        time_port: TimePort | None = None,
    ) -> None:
        self._content_repo = content_repo
        self._schedule_repo = schedule_repo
        self._index = index
        self._time = time_port

    def _now_utc(self) -> datetime:
        if self._time:
            return self._time.now_utc()
        return datetime.now(UTC)

    def validate_schedule(
        self, when: datetime, action: str
    ) -> tuple[datetime, ScheduleAction]:
        """Normalize (when, action) or raise InvalidScheduleError. Writes nothing."""
        valid_action = validate_action(action)
        when_utc = to_utc(when)
        if when_utc <= self._now_utc():
            raise InvalidScheduleError(
                "Scheduled date must be in the future",
                code="schedule_time_past",
            )
        return when_utc, valid_action

    # --- Mutations ---

    def schedule_content(
        self,
        content_id: UUID,
        when: datetime,
        action: str,
        note: str = "",
    ) -> ScheduleEntry:
        """
        Schedule content for publication or unpublication.

        Replaces any existing schedule for the same (content_id, action).

        Raises:
            InvalidScheduleError: unknown action or `when` not in the future
            NotFoundError: content does not exist
        """
        when_utc, valid_action = self.validate_schedule(when, action)

        if not self._content_repo.exists(content_id):
            raise NotFoundError(content_id)

        self._schedule_repo.delete_for_content(content_id, valid_action)

        entry = ScheduleEntry(
            content_id=content_id,
            action=valid_action,
            scheduled_at=when_utc,
            created_at=self._now_utc(),
            note=note,
        )
        saved = self._schedule_repo.create(entry)
        self._index.put(saved)

        logger.info(
            "Scheduled %s of content %s at %s",
            valid_action,
            content_id,
            when_utc.isoformat(),
        )
        return saved

    def update_schedule(
        self,
        content_id: UUID,
        when: datetime,
        action: str,
        note: str | None = None,
    ) -> ScheduleEntry:
        """
        Move an existing schedule to a new time, keeping its ID.

        Falls back to schedule_content when no schedule exists. A note of
        None keeps the existing note.
        """
        when_utc, valid_action = self.validate_schedule(when, action)

        existing = self._schedule_repo.find_one(content_id, valid_action)
        if existing is None:
            return self.schedule_content(content_id, when_utc, valid_action, note or "")

        updated = replace(
            existing,
            scheduled_at=when_utc,
            note=existing.note if note is None else note,
        )
        saved = self._schedule_repo.update(updated)
        self._index.put(saved)

        logger.info(
            "Rescheduled %s of content %s to %s",
            valid_action,
            content_id,
            when_utc.isoformat(),
        )
        return saved

    def remove_schedule(self, content_id: UUID, action: str) -> bool:
        """Cancel one schedule. Returns False if there was none."""
        valid_action = validate_action(action)
        removed = self._schedule_repo.delete_for_content(content_id, valid_action)
        self._index.remove(content_id, valid_action)
        if removed:
            logger.info("Removed %s schedule for content %s", valid_action, content_id)
        return removed > 0

    def remove_all_schedules(self, content_id: UUID) -> int:
        """Cancel both schedules, e.g. before content deletion."""
        removed = self._schedule_repo.delete_for_content(content_id)
        self._index.remove_content(content_id)
        if removed:
            logger.info("Removed %d schedules for content %s", removed, content_id)
        return removed

    # --- Queries ---

    def get_content_schedule(self, content_id: UUID) -> ContentSchedule:
        """Read both schedules of a content item from the store."""
        infos: dict[str, ScheduleInfo] = {}
        for entry in self._schedule_repo.list_for_content(content_id):
            infos[entry.action] = ScheduleInfo(
                scheduled_at=entry.scheduled_at,
                created_at=entry.created_at,
                note=entry.note,
            )
        return ContentSchedule(
            content_id=content_id,
            publish=infos.get("publish"),
            unpublish=infos.get("unpublish"),
        )

    def is_scheduled(self, content_id: UUID, action: str) -> bool:
        """Index lookup: is there a pending schedule for (content_id, action)."""
        return self._index.contains(content_id, validate_action(action))

    def pending(self, content_id: UUID) -> dict[ScheduleAction, IndexEntry]:
        """Index lookup of both pending schedules of a content item."""
        found: dict[ScheduleAction, IndexEntry] = {}
        for action in SCHEDULE_ACTIONS:
            item = self._index.get(content_id, action)
            if item is not None:
                found[action] = item
        return found

    # --- Legacy Migration ---

    def backfill_legacy_schedules(self) -> list[ScheduleEntry]:
        """
        Move legacy scheduled_publish fields into publish schedule entries.

        Past-due values keep their time so the next tick applies them. An
        existing publish entry takes precedence over the legacy field. The
        field is cleared on the content either way.
        """
        created: list[ScheduleEntry] = []
        now = self._now_utc()

        for item in self._content_repo.list_with_scheduled_publish():
            if item.scheduled_publish is None:
                continue

            if self._schedule_repo.find_one(item.id, "publish") is None:
                entry = ScheduleEntry(
                    content_id=item.id,
                    action="publish",
                    scheduled_at=item.scheduled_publish,
                    created_at=now,
                    note=LEGACY_BACKFILL_NOTE,
                )
                saved = self._schedule_repo.create(entry)
                self._index.put(saved)
                created.append(saved)
            else:
                logger.info(
                    "Content %s already has a publish schedule; dropping legacy value",
                    item.id,
                )

            self._content_repo.save(item.model_copy(update={"scheduled_publish": None}))

        if created:
            logger.info("Backfilled %d legacy publish schedules", len(created))
        return created
