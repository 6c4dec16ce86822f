"""
SchedulerEngine - timer-driven publish/unpublish of due content.

Runs a background thread that wakes at a fixed interval and processes
every schedule entry whose time has come.

Key behaviors:
- Each due entry is handled independently; one failure never aborts
  the rest of the tick
- Per-entry order: mutate content -> persist -> delete entry -> update
  index, so a crash leaves at worst a redundant entry
- An entry moved or cancelled while the tick runs is left alone: the
  content is not changed and the entry keeps its new time
- Ticks never overlap; a firing during a running tick is skipped
- Nothing escapes a tick; failures are logged and the timer keeps going
"""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from src.core.entities import (
    ACTION_TARGET_STATUS,
    SCHEDULE_ACTIONS,
    ContentItem,
    ScheduleAction,
    ScheduleEntry,
)
from src.core.ports.jobs import (
    EntryOutcome,
    EntryResult,
    OrphanedScheduleError,
    TickResult,
)
from src.domain.state import transition

from ._impl import DEFAULT_CONFIG, SchedulerConfig
from ._index import ScheduleIndex

if TYPE_CHECKING:
    from src.core.ports.db import ContentRepoPort, ScheduleRepoPort
    from src.core.ports.time import TimePort

logger = logging.getLogger(__name__)

AUTO_TRANSITION_NOTES: dict[ScheduleAction, str] = {
    "publish": "Auto-published by scheduler",
    "unpublish": "Auto-unpublished by scheduler",
}


def needs_transition(content: ContentItem, action: ScheduleAction) -> bool:
    """
    Whether applying action would change the content.

    Publish applies to anything not yet published. Unpublish only takes
    published content back to draft; draft and archived content are left
    alone.
    """
    if action == "publish":
        return content.status != "published"
    return content.status == "published"


class SchedulerEngine:
    """
    Scheduler engine.

    Owns the repeating timer and the Schedule Index.
    """

    def __init__(
        self,
        content_repo: ContentRepoPort,
        schedule_repo: ScheduleRepoPort,
        time_port: TimePort | None = None,
        config: SchedulerConfig | None = None,
        index: ScheduleIndex | None = None,
    ) -> None:
        self._content_repo = content_repo
        self._schedule_repo = schedule_repo
        self._time = time_port
        self._config = config or DEFAULT_CONFIG
        self.index = index or ScheduleIndex()

        self._state_lock = threading.Lock()
        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def _now_utc(self) -> datetime:
        if self._time:
            return self._time.now_utc()
        return datetime.now(UTC)

    # --- Lifecycle ---

    def start(self) -> None:
        """
        Reload the index from the store and start the timer.

        Safe to call repeatedly: the index is reloaded each time but only
        one timer thread ever runs.
        """
        self.reload_index()

        with self._state_lock:
            if self._thread is not None and self._thread.is_alive():
                return

            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._poll_loop,
                args=(self._stop_event,),
                name="content-scheduler",
                daemon=True,
            )
            self._thread.start()

        logger.info(
            "Content scheduler started (interval: %.1fs)",
            self._config.tick_interval_seconds,
        )

    def stop(self) -> None:
        """Stop the timer. A tick already running is allowed to finish."""
        with self._state_lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            self._thread = None

        if thread is not threading.current_thread():
            thread.join(timeout=self._config.stop_timeout_seconds)
        logger.info("Content scheduler stopped")

    @property
    def is_running(self) -> bool:
        with self._state_lock:
            return self._thread is not None and self._thread.is_alive()

    def reload_index(self) -> int:
        """Rebuild the index from the store. Returns the number loaded."""
        self.index.clear()
        try:
            entries = self._schedule_repo.list_all()
        except Exception:
            logger.exception("Error loading scheduled items")
            return 0

        count = self.index.load(entries)
        logger.info("Loaded %d scheduled items", count)
        return count

    def _poll_loop(self, stop_event: threading.Event) -> None:
        """Background timer loop."""
        while not stop_event.wait(timeout=self._config.tick_interval_seconds):
            if stop_event.is_set():
                break
            try:
                self.tick()
            except Exception:
                logger.exception("Error in scheduler poll loop")

    # --- Tick ---

    def trigger_now(self) -> TickResult:
        """Run one tick immediately."""
        return self.tick()

    def tick(self) -> TickResult:
        """Process every due entry once. Never raises."""
        if not self._tick_lock.acquire(blocking=False):
            logger.warning("Previous scheduler tick still running; skipping")
            return TickResult(ran=False)

        try:
            return self._run_tick()
        except Exception as e:
            logger.exception("Error processing scheduled content")
            return TickResult(error=str(e))
        finally:
            self._tick_lock.release()

    def _run_tick(self) -> TickResult:
        result = TickResult()
        now = self._now_utc()

        for action in SCHEDULE_ACTIONS:
            try:
                due = self._schedule_repo.list_due(action, now)
            except Exception as e:
                logger.exception("Error processing %s schedules", action)
                result.error = str(e)
                continue

            if due:
                logger.info("Found %d items to %s", len(due), action)

            for entry in due:
                result.results.append(self._process_entry(entry, now))

        if result.total_processed:
            logger.info(
                "Scheduler tick processed %d entries: %d transitioned, "
                "%d skipped, %d orphaned, %d failed",
                result.total_processed,
                result.transitioned,
                result.skipped,
                result.orphaned,
                result.failed,
            )
        return result

    def _process_entry(self, entry: ScheduleEntry, now: datetime) -> EntryResult:
        """Apply one due entry; failures stay contained to this entry."""
        try:
            outcome, message = self._apply(entry, now)
            self._consume(entry)
        except Exception as e:
            logger.exception(
                "Error %sing content %s (schedule %s)",
                entry.action,
                entry.content_id,
                entry.id,
            )
            return EntryResult(
                outcome=EntryOutcome.FAILED,
                entry_id=entry.id,
                content_id=entry.content_id,
                action=entry.action,
                message=f"Failed to {entry.action} content",
                error=str(e),
            )

        return EntryResult(
            outcome=outcome,
            entry_id=entry.id,
            content_id=entry.content_id,
            action=entry.action,
            message=message,
        )

    def _resolve_content(self, entry: ScheduleEntry) -> ContentItem:
        content = self._content_repo.get_by_id(entry.content_id)
        if content is None:
            raise OrphanedScheduleError(entry.id, entry.content_id)
        return content

    def _apply(self, entry: ScheduleEntry, now: datetime) -> tuple[EntryOutcome, str]:
        """Mutate and persist the content for a due entry."""
        try:
            content = self._resolve_content(entry)
        except OrphanedScheduleError as e:
            logger.info("%s, removing schedule", e)
            return EntryOutcome.ORPHANED, str(e)

        if self._superseded(entry):
            logger.info(
                "Schedule %s for content %s changed during tick; leaving it",
                entry.id,
                entry.content_id,
            )
            return EntryOutcome.SKIPPED, "Schedule changed during tick"

        if not needs_transition(content, entry.action):
            logger.info(
                "Content %s already %s; removing redundant %s schedule",
                content.id,
                content.status,
                entry.action,
            )
            return EntryOutcome.SKIPPED, f"Content already {content.status}"

        updated = transition(
            content,
            ACTION_TARGET_STATUS[entry.action],
            now,
            note=AUTO_TRANSITION_NOTES[entry.action],
            clear_published_at=self._config.clear_published_at_on_unpublish,
        )
        self._content_repo.save(updated)

        logger.info(
            "%s scheduled content: %s (%s)",
            "Published" if entry.action == "publish" else "Unpublished",
            content.title,
            content.id,
        )
        return EntryOutcome.TRANSITIONED, f"Content {updated.status}"

    def _superseded(self, entry: ScheduleEntry) -> bool:
        """Whether the stored entry no longer matches what the tick read."""
        current = self._schedule_repo.find_one(entry.content_id, entry.action)
        return (
            current is None
            or current.id != entry.id
            or current.scheduled_at != entry.scheduled_at
        )

    def _consume(self, entry: ScheduleEntry) -> None:
        """Remove a processed entry from the store, then the index."""
        if not self._schedule_repo.delete(entry.id, scheduled_at=entry.scheduled_at):
            return
        self.index.remove(
            entry.content_id,
            entry.action,
            entry_id=entry.id,
            scheduled_at=entry.scheduled_at,
        )
