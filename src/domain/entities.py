from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
ContentStatus = Literal["draft", "published", "archived"]

# --- Content ---

class RevisionRecord(BaseModel):
    changed_at: datetime
    changes: str
    editor_id: UUID | None = None  # None for automatic (scheduler) changes

class ContentItem(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    slug: str
    title: str
    body: str = ""
    status: ContentStatus = "draft"

    published_at: datetime | None = None
    # Legacy field-on-content schedule. Only read by the backfill migration.
    scheduled_publish: datetime | None = None

    author_id: UUID | None = None
    revision_history: list[RevisionRecord] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
