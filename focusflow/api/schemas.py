"""
Pydantic schemas for the FastAPI local API.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..sessions.models import to_iso
from ..timer.state import TimerState

# ── Timer ──────────────────────────────────────────────────────────────────

class StartRequest(BaseModel):
    category: Optional[str] = Field(
        None, description="deep-learning | active-coding | job-search | ... (unknown → none)"
    )


class TimerStateOut(BaseModel):
    phase: str
    paused_from: Optional[str]
    remaining_seconds: int
    total_seconds: int
    current_cycle: int
    started_at: Optional[str]
    session_id: Optional[str]
    category: Optional[str]
    progress: float = Field(..., ge=0.0, le=100.0)

    @classmethod
    def from_state(cls, s: TimerState) -> "TimerStateOut":
        return cls(
            phase=s.phase.value,
            paused_from=s.paused_from.value if s.paused_from else None,
            remaining_seconds=s.remaining_seconds,
            total_seconds=s.total_seconds,
            current_cycle=s.current_cycle,
            started_at=to_iso(s.started_at),
            session_id=s.session_id,
            category=s.category,
            progress=max(0.0, min(100.0, s.progress)),
        )


class MirrorSnapshotOut(BaseModel):
    phase: str
    remainingSeconds: int
    totalSeconds: int
    currentCycle: int
    startedAt: Optional[str]
    sessionId: Optional[str]
    category: Optional[str] = None


# ── Sessions ───────────────────────────────────────────────────────────────

class SessionRecordOut(BaseModel):
    id: str
    startedAt: str
    endedAt: Optional[str] = None
    kind: str = Field(..., description="work | break | long-break")
    completed: bool
    category: Optional[str] = None


class DailyCountOut(BaseModel):
    date: str
    completed_work_sessions: int


class StreakOut(BaseModel):
    current_streak: int
    longest_streak: int
    last_active_date: Optional[str]
    streak_dates: List[str]

