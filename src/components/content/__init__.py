"""
Content component - content editing with scheduled publish/unpublish.
"""

from ._impl import UNSET, ContentService, ScheduleDate

__all__ = [
    "UNSET",
    "ContentService",
    "ScheduleDate",
]
