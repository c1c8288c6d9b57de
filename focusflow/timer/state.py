"""
Timer state record — everything the focus timer knows, as plain data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TimerPhase(str, Enum):
    IDLE = "idle"
    WORK = "work"
    BREAK = "break"
    LONG_BREAK = "long-break"
    PAUSED = "paused"


RUNNING_PHASES = frozenset({TimerPhase.WORK, TimerPhase.BREAK, TimerPhase.LONG_BREAK})


@dataclass
class TimerState:
    phase: TimerPhase = TimerPhase.IDLE
    remaining_seconds: int = 1500
    total_seconds: int = 1500
    current_cycle: int = 1                  # bumps only after a break completes
    started_at: Optional[datetime] = None
    session_id: Optional[str] = None
    last_handled_session_id: Optional[str] = None   # completion already ran for this id
    paused_from: Optional[TimerPhase] = None
    category: Optional[str] = None

    @classmethod
    def initial(cls, work_seconds: int) -> "TimerState":
        return cls(
            phase=TimerPhase.IDLE,
            remaining_seconds=work_seconds,
            total_seconds=work_seconds,
        )

    @property
    def is_running(self) -> bool:
        return self.phase in RUNNING_PHASES

    @property
    def progress(self) -> float:
        """Percent of the current interval already elapsed (0-100)."""
        if self.total_seconds <= 0:
            return 0.0
        return (self.total_seconds - self.remaining_seconds) / self.total_seconds * 100.0
