from datetime import datetime
from typing import Any
from uuid import UUID

from src.domain.entities import ContentItem, ContentStatus, RevisionRecord


def can_transition(current: ContentStatus, new: ContentStatus) -> bool:
    """
    Determine if a state transition is allowed.
    """
    if current == new:
        return True

    if current == "draft":
        return new in ("published", "archived")

    if current == "published":
        return new in ("draft", "archived")  # Un-publish / retire

    if current == "archived":
        # Restore, or re-publish straight from the archive
        return new in ("draft", "published")

    return False


def transition(
    item: ContentItem,
    new_status: ContentStatus,
    now: datetime,
    *,
    note: str | None = None,
    editor_id: UUID | None = None,
    clear_published_at: bool = False,
) -> ContentItem:
    """
    Return a NEW ContentItem with the updated status and timestamps.

    When `note` is given a revision record is appended to the history.
    `clear_published_at` resets published_at when moving back to draft;
    by default it is kept so it records the last publication.
    Raises ValueError if transition is invalid.
    """
    if item.status == new_status:
        return item.model_copy()

    if not can_transition(item.status, new_status):
        raise ValueError(f"Invalid transition from {item.status} to {new_status}")

    updates: dict[str, Any] = {
        "status": new_status,
        "updated_at": now,
    }

    if new_status == "published":
        updates["published_at"] = now

    if new_status == "draft" and clear_published_at:
        updates["published_at"] = None

    if note:
        record = RevisionRecord(changed_at=now, changes=note, editor_id=editor_id)
        updates["revision_history"] = [*item.revision_history, record]

    return item.model_copy(update=updates)
