"""Shared test doubles."""

from datetime import datetime, timedelta
from uuid import uuid4

from src.core.entities import ContentItem


class FrozenClock:
    """TimePort with a settable current time."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_content(**overrides) -> ContentItem:
    defaults = {
        "title": "Test Post",
        "slug": f"test-post-{uuid4().hex[:8]}",
        "body": "Hello",
    }
    defaults.update(overrides)
    return ContentItem(**defaults)
