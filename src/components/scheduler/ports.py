"""
Scheduler component port definitions.

The component depends on the shared repository and time ports; they are
re-exported here so callers can wire the component from one module.
"""

from __future__ import annotations

from src.core.ports.db import ContentRepoPort, ScheduleRepoPort
from src.core.ports.time import TimePort

__all__ = [
    "ContentRepoPort",
    "ScheduleRepoPort",
    "TimePort",
]
