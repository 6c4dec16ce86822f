from typing import Any, NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.deps import get_content_service
from src.api.schemas import (
    ContentCreateRequest,
    ContentItemResponse,
    ContentScheduleUpdateRequest,
)
from src.components.content import UNSET, ContentService
from src.core.entities import ContentItem
from src.core.ports.jobs import (
    InvalidScheduleError,
    NotFoundError,
    ScheduleError,
    TransientStoreError,
)

router = APIRouter()


def _raise_http(e: Exception) -> NoReturn:
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail=str(e)) from e
    if isinstance(e, InvalidScheduleError):
        raise HTTPException(status_code=400, detail={"code": e.code, "message": str(e)}) from e
    if isinstance(e, TransientStoreError):
        raise HTTPException(status_code=503, detail=str(e)) from e
    if isinstance(e, ValueError):
        raise HTTPException(status_code=409, detail=str(e)) from e
    raise e


@router.post("", response_model=ContentItemResponse, status_code=status.HTTP_201_CREATED)
def create_content(
    req: ContentCreateRequest,
    service: ContentService = Depends(get_content_service),
) -> Any:
    """Create a draft, scheduling publish/unpublish if dates are given."""
    item = ContentItem(
        title=req.title,
        slug=req.slug,
        body=req.body,
        author_id=req.author_id,
    )
    try:
        return service.create(item, publish_at=req.publish_at, unpublish_at=req.unpublish_at)
    except (ScheduleError, ValueError) as e:
        _raise_http(e)


@router.get("/{item_id}", response_model=ContentItemResponse)
def get_content(
    item_id: UUID,
    service: ContentService = Depends(get_content_service),
) -> Any:
    """Get a content item."""
    try:
        return service.get(item_id)
    except ScheduleError as e:
        _raise_http(e)


@router.patch("/{item_id}", response_model=ContentItemResponse)
def update_schedule_dates(
    item_id: UUID,
    req: ContentScheduleUpdateRequest,
    service: ContentService = Depends(get_content_service),
) -> Any:
    """
    Apply publish_at/unpublish_at from a content edit.

    A date (re)schedules, null cancels, an omitted field is left alone.
    """
    sent = req.model_fields_set
    try:
        service.apply_schedule_dates(
            item_id,
            publish_at=req.publish_at if "publish_at" in sent else UNSET,
            unpublish_at=req.unpublish_at if "unpublish_at" in sent else UNSET,
        )
        return service.get(item_id)
    except ScheduleError as e:
        _raise_http(e)


@router.delete("/{item_id}")
def delete_content(
    item_id: UUID,
    service: ContentService = Depends(get_content_service),
) -> dict[str, Any]:
    """Delete content and cancel its pending schedules."""
    try:
        service.get(item_id)
        service.delete(item_id)
    except ScheduleError as e:
        _raise_http(e)
    return {"success": True, "id": str(item_id)}
