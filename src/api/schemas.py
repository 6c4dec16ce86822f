from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

# --- Shared Enums/Types ---
ContentStatus = Literal["draft", "published", "archived"]


# --- Content Items ---
class ContentItemBase(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    body: str = ""


class ContentCreateRequest(ContentItemBase):
    author_id: UUID | None = None
    publish_at: datetime | None = None
    unpublish_at: datetime | None = None


class ContentScheduleUpdateRequest(BaseModel):
    """Schedule fields of a content edit. Omitted fields are left alone."""

    publish_at: datetime | None = None
    unpublish_at: datetime | None = None


class RevisionResponse(BaseModel):
    changed_at: datetime
    changes: str
    editor_id: UUID | None = None


class ContentItemResponse(ContentItemBase):
    id: UUID
    status: ContentStatus
    published_at: datetime | None = None
    author_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
    revision_history: list[RevisionResponse] = []


# --- Schedules ---
class ScheduleRequest(BaseModel):
    """Request to schedule a publish or unpublish."""

    date: datetime = Field(..., description="Target time; naive values are UTC")
    action: str = Field(..., description='"publish" or "unpublish"')
    note: str | None = None


class ScheduleEntryResponse(BaseModel):
    id: UUID
    content_id: UUID
    action: str
    scheduled_at: datetime
    created_at: datetime
    note: str = ""


class ScheduleInfoResponse(BaseModel):
    scheduled_at: datetime
    created_at: datetime
    note: str = ""


class ContentScheduleResponse(BaseModel):
    content_id: UUID
    publish: ScheduleInfoResponse | None = None
    unpublish: ScheduleInfoResponse | None = None


class ScheduleErrorResponse(BaseModel):
    code: str
    message: str
    content_id: UUID | None = None


class PendingEntryResponse(BaseModel):
    content_id: UUID
    action: str
    schedule_entry_id: UUID
    scheduled_at: datetime


class PendingResponse(BaseModel):
    total_count: int
    items: list[PendingEntryResponse]


class EntryResultResponse(BaseModel):
    outcome: str
    entry_id: UUID
    content_id: UUID
    action: str
    message: str = ""
    error: str | None = None


class TickResponse(BaseModel):
    ran: bool
    total_processed: int
    transitioned: int
    skipped: int
    orphaned: int
    failed: int
    error: str | None = None
    results: list[EntryResultResponse] = []
