"""
Read-only session statistics for the reward/achievement collaborator.

The reward system never writes to the session log. It asks for completed
work sessions per day and derives streaks from those counts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional


@dataclass
class StreakStats:
    current_streak: int
    longest_streak: int
    last_active_date: Optional[str]       # "YYYY-MM-DD" of the latest qualifying day
    streak_dates: List[str] = field(default_factory=list)


def _parse_day(day: str) -> date:
    return datetime.strptime(day, "%Y-%m-%d").date()


def compute_streak(
    counts_by_date: Dict[str, int],
    min_sessions_per_day: int = 1,
    today: Optional[date] = None,
) -> StreakStats:
    """
    A day qualifies when it has at least *min_sessions_per_day* completed
    work sessions. The current streak only counts if the latest qualifying
    day is today or yesterday.
    """
    if today is None:
        today = datetime.now(timezone.utc).date()

    valid = sorted(d for d, n in counts_by_date.items() if n >= min_sessions_per_day)
    if not valid:
        return StreakStats(current_streak=0, longest_streak=0, last_active_date=None)

    days = [_parse_day(d) for d in valid]

    current: List[str] = []
    if (today - days[-1]).days <= 1:
        current.append(valid[-1])
        for i in range(len(days) - 2, -1, -1):
            if days[i + 1] - days[i] != timedelta(days=1):
                break
            current.insert(0, valid[i])

    longest = run = 1
    for prev, cur in zip(days, days[1:]):
        if cur - prev == timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)

    return StreakStats(
        current_streak=len(current),
        longest_streak=longest,
        last_active_date=valid[-1],
        streak_dates=current,
    )
