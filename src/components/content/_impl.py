"""
ContentService - the content-editing flow's use of the Schedule Manager.

Saving content never touches status directly for scheduled changes; the
publish/unpublish dates given by the editor are turned into schedule
entries and the scheduler engine applies them when due.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Final
from uuid import UUID

from src.core.entities import ContentItem
from src.core.ports.jobs import NotFoundError

if TYPE_CHECKING:
    from src.components.scheduler import ScheduleManager
    from src.core.ports.db import ContentRepoPort

logger = logging.getLogger(__name__)


class _Unset:
    """Marker for a schedule date the caller did not mention."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()

ScheduleDate = datetime | None | _Unset


class ContentService:
    def __init__(self, repo: ContentRepoPort, manager: ScheduleManager) -> None:
        self.repo = repo
        self.manager = manager

    def get(self, content_id: UUID) -> ContentItem:
        item = self.repo.get_by_id(content_id)
        if item is None:
            raise NotFoundError(content_id)
        return item

    def create(
        self,
        item: ContentItem,
        publish_at: datetime | None = None,
        unpublish_at: datetime | None = None,
    ) -> ContentItem:
        """
        Save new content, then schedule any dates given with it.

        Both dates are validated before anything is written.
        """
        if publish_at is not None:
            self.manager.validate_schedule(publish_at, "publish")
        if unpublish_at is not None:
            self.manager.validate_schedule(unpublish_at, "unpublish")

        saved = self.repo.save(item)
        if publish_at is not None:
            self.manager.update_schedule(saved.id, publish_at, "publish")
        if unpublish_at is not None:
            self.manager.update_schedule(saved.id, unpublish_at, "unpublish")
        return saved

    def apply_schedule_dates(
        self,
        content_id: UUID,
        publish_at: ScheduleDate = UNSET,
        unpublish_at: ScheduleDate = UNSET,
    ) -> None:
        """
        Apply the schedule fields of a content edit.

        A datetime (re)schedules the action, None cancels it, UNSET leaves
        it alone. Nothing changes unless every given date is valid.
        """
        if not self.repo.exists(content_id):
            raise NotFoundError(content_id)

        changes = (("publish", publish_at), ("unpublish", unpublish_at))
        for action, value in changes:
            if isinstance(value, datetime):
                self.manager.validate_schedule(value, action)

        for action, value in changes:
            if isinstance(value, _Unset):
                continue
            if value is None:
                self.manager.remove_schedule(content_id, action)
            else:
                self.manager.update_schedule(content_id, value, action)

    def delete(self, content_id: UUID) -> None:
        """Cancel pending schedules, then delete the content."""
        removed = self.manager.remove_all_schedules(content_id)
        self.repo.delete(content_id)
        logger.info("Deleted content %s (%d schedules removed)", content_id, removed)
