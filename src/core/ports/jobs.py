"""
Scheduler Tick Results and Errors.

Result and error types shared by the scheduler component and its callers.

Key requirements:
- A single runner per process; ticks never overlap
- Per-entry failures never abort the rest of a tick
- Errors never escape a tick; they are logged and reported in TickResult
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID


class EntryOutcome(Enum):
    """Outcome of processing one due schedule entry."""

    TRANSITIONED = "transitioned"
    SKIPPED = "skipped"  # Nothing to apply: content already in target state, or entry moved
    ORPHANED = "orphaned"  # Content no longer exists
    FAILED = "failed"


@dataclass
class EntryResult:
    """Result of processing a single due entry."""

    outcome: EntryOutcome
    entry_id: UUID
    content_id: UUID
    action: str
    message: str = ""
    error: str | None = None


@dataclass
class TickResult:
    """Result of one scheduler tick."""

    results: list[EntryResult] = field(default_factory=list)
    ran: bool = True  # False when skipped because another tick was running
    error: str | None = None  # Tick-level failure (e.g. due query failed)

    def _count(self, outcome: EntryOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def total_processed(self) -> int:
        return len(self.results)

    @property
    def transitioned(self) -> int:
        return self._count(EntryOutcome.TRANSITIONED)

    @property
    def skipped(self) -> int:
        return self._count(EntryOutcome.SKIPPED)

    @property
    def orphaned(self) -> int:
        return self._count(EntryOutcome.ORPHANED)

    @property
    def failed(self) -> int:
        return self._count(EntryOutcome.FAILED)


# Error types


class ScheduleError(Exception):
    """Base exception for scheduling errors."""

    pass


class InvalidScheduleError(ScheduleError):
    """Requested schedule is invalid (time not in future, unknown action)."""

    def __init__(self, message: str, code: str = "invalid_schedule") -> None:
        self.code = code
        super().__init__(message)


class NotFoundError(ScheduleError):
    """Referenced content does not exist."""

    def __init__(self, content_id: UUID, message: str = "Content not found") -> None:
        self.content_id = content_id
        super().__init__(f"{message}: {content_id}")


class OrphanedScheduleError(ScheduleError):
    """Due entry references content that no longer exists."""

    def __init__(self, entry_id: UUID, content_id: UUID) -> None:
        self.entry_id = entry_id
        self.content_id = content_id
        super().__init__(f"Schedule {entry_id} references missing content {content_id}")


class TransientStoreError(ScheduleError):
    """Store I/O failed; the operation may succeed if retried."""

    pass
