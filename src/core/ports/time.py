"""
Time Adapter Interface.

All internal timestamps are timezone-aware UTC. Scheduling decisions
(future-only validation, due checks) go through this port so tests can
freeze the clock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimePort(Protocol):
    """Time adapter interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time (timezone-aware)."""
        ...
