# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.db import ContentRepoPort, ScheduleRepoPort
from src.core.ports.jobs import (
    EntryOutcome,
    EntryResult,
    InvalidScheduleError,
    NotFoundError,
    OrphanedScheduleError,
    ScheduleError,
    TickResult,
    TransientStoreError,
)
from src.core.ports.time import TimePort

__all__ = [
    # Repositories
    "ContentRepoPort",
    "ScheduleRepoPort",
    # Tick results
    "EntryOutcome",
    "EntryResult",
    "TickResult",
    # Errors
    "InvalidScheduleError",
    "NotFoundError",
    "OrphanedScheduleError",
    "ScheduleError",
    "TransientStoreError",
    # Time
    "TimePort",
]
