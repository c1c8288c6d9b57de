"""
Session Record — one per interval attempt, complete or aborted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class SessionKind(str, Enum):
    WORK = "work"
    BREAK = "break"
    LONG_BREAK = "long-break"


CATEGORIES = frozenset({
    "deep-learning",
    "active-coding",
    "job-search",
    "tutorial-following",
    "social-media",
    "streaming",
    "other",
})


def normalise_category(value: Optional[str]) -> Optional[str]:
    """Return *value* if it is a known category, else None."""
    return value if value in CATEGORIES else None


def to_iso(ts: Optional[datetime]) -> Optional[str]:
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    # fixed width so stored strings sort chronologically
    return ts.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


@dataclass(frozen=True)
class SessionRecord:
    id: str
    started_at: datetime
    ended_at: Optional[datetime]
    kind: SessionKind
    completed: bool
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Persisted/JSON shape: camelCase keys, ISO-8601 UTC timestamps."""
        out: Dict[str, Any] = {
            "id": self.id,
            "startedAt": to_iso(self.started_at),
            "endedAt": to_iso(self.ended_at),
            "kind": self.kind.value,
            "completed": self.completed,
        }
        if self.ended_at is None:
            del out["endedAt"]
        if self.category is not None:
            out["category"] = self.category
        return out
