"""
/sessions — read-only access to the session log and its aggregates.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...api.schemas import DailyCountOut, SessionRecordOut, StreakOut
from ...sessions.models import SessionKind
from ...sessions.stats import compute_streak

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_store(request: Request):
    return request.app.state.store


@router.get("", response_model=List[SessionRecordOut])
def query_sessions(
    kind: Optional[str] = Query(default=None, description="work | break | long-break"),
    completed: Optional[bool] = Query(default=None),
    since: Optional[datetime] = Query(default=None, description="ISO-8601 lower bound on startedAt"),
    until: Optional[datetime] = Query(default=None, description="ISO-8601 upper bound on startedAt"),
    limit: int = Query(default=200, le=1000),
    store=Depends(_get_store),
):
    if kind is not None and kind not in {k.value for k in SessionKind}:
        raise HTTPException(status_code=422, detail=f"Unknown session kind: {kind}")
    records = store.query(
        kind=SessionKind(kind) if kind else None,
        completed=completed,
        since=since,
        until=until,
        limit=limit,
    )
    return [SessionRecordOut(**r.to_dict()) for r in records]


@router.get("/daily", response_model=List[DailyCountOut])
def daily_counts(
    since: Optional[datetime] = Query(default=None, description="ISO-8601 lower bound on endedAt"),
    until: Optional[datetime] = Query(default=None, description="ISO-8601 upper bound on endedAt"),
    store=Depends(_get_store),
):
    """Completed work sessions per UTC day, oldest first."""
    counts = store.completed_work_by_date(since=since, until=until)
    return [DailyCountOut(date=d, completed_work_sessions=n) for d, n in counts.items()]


@router.get("/streak", response_model=StreakOut)
def streak(
    min_per_day: int = Query(default=1, ge=1, description="Sessions needed for a day to count"),
    store=Depends(_get_store),
):
    s = compute_streak(store.completed_work_by_date(), min_sessions_per_day=min_per_day)
    return StreakOut(
        current_streak=s.current_streak,
        longest_streak=s.longest_streak,
        last_active_date=s.last_active_date,
        streak_dates=s.streak_dates,
    )
