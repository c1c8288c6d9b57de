"""
Durable timer mirror — an advisory snapshot of the timer for other views.

One writer (the FocusTimer that owns the countdown) publishes a snapshot on
every transition; the snapshot is written to a JSON file and pushed to
in-process subscribers. Readers only ever see frozen snapshots and have no
path back into the timer, so the mirror can never drive a transition.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..logging_handler import setup_logger
from ..sessions.models import to_iso
from .state import TimerState

logger = setup_logger(__name__)


@dataclass(frozen=True)
class MirrorSnapshot:
    phase: str
    remaining_seconds: int
    total_seconds: int
    current_cycle: int
    started_at: Optional[str]
    session_id: Optional[str]
    category: Optional[str] = None

    @classmethod
    def from_state(cls, state: TimerState) -> "MirrorSnapshot":
        return cls(
            phase=state.phase.value,
            remaining_seconds=state.remaining_seconds,
            total_seconds=state.total_seconds,
            current_cycle=state.current_cycle,
            started_at=to_iso(state.started_at),
            session_id=state.session_id,
            category=state.category,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MirrorSnapshot":
        return cls(
            phase=str(data["phase"]),
            remaining_seconds=int(data["remainingSeconds"]),
            total_seconds=int(data["totalSeconds"]),
            current_cycle=int(data["currentCycle"]),
            started_at=data.get("startedAt"),
            session_id=data.get("sessionId"),
            category=data.get("category"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "phase": self.phase,
            "remainingSeconds": self.remaining_seconds,
            "totalSeconds": self.total_seconds,
            "currentCycle": self.current_cycle,
            "startedAt": self.started_at,
            "sessionId": self.session_id,
        }
        if self.category is not None:
            out["category"] = self.category
        return out


Subscriber = Callable[[MirrorSnapshot], object]


class MirrorChannel:
    """
    Publish/subscribe channel with a single designated writer.

    Usage:
        channel = MirrorChannel(data_dir / "timer_state.json")
        writer = channel.claim_writer()        # handed to the FocusTimer
        unsubscribe = channel.subscribe(print) # any number of readers
        channel.snapshot()                     # last published snapshot
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        self._latest: Optional[MirrorSnapshot] = None
        self._subscribers: List[Subscriber] = []
        self._writer: Optional["MirrorWriter"] = None

    # ------------------------------------------------------------------
    # Writer side
    # ------------------------------------------------------------------

    def claim_writer(self) -> "MirrorWriter":
        if self._writer is not None:
            raise RuntimeError("mirror channel already has a writer")
        self._writer = MirrorWriter(self)
        return self._writer

    def _publish(self, snapshot: MirrorSnapshot) -> None:
        self._latest = snapshot
        if self.path is not None:
            try:
                _write_atomic(self.path, snapshot.to_dict())
            except OSError:
                logger.exception("Could not persist timer mirror to %s", self.path)
        for fn in list(self._subscribers):
            try:
                fn(snapshot)
            except Exception:
                logger.exception("Mirror subscriber %r failed", fn)

    # ------------------------------------------------------------------
    # Reader side
    # ------------------------------------------------------------------

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register *fn* for every future snapshot; returns an unsubscribe callable."""
        self._subscribers.append(fn)

        def _unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return _unsubscribe

    def snapshot(self) -> Optional[MirrorSnapshot]:
        """Latest snapshot published in this process, else whatever is on disk."""
        if self._latest is not None:
            return self._latest
        if self.path is not None:
            return read_mirror_file(self.path)
        return None


class MirrorWriter:
    """Write handle held only by the owning timer."""

    def __init__(self, channel: MirrorChannel):
        self._channel = channel

    def publish(self, state: TimerState) -> MirrorSnapshot:
        snapshot = MirrorSnapshot.from_state(state)
        self._channel._publish(snapshot)
        return snapshot


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def read_mirror_file(path: Path) -> Optional[MirrorSnapshot]:
    """Read a mirror file written by another process; None if absent or unreadable."""
    if not path.exists():
        return None
    try:
        return MirrorSnapshot.from_dict(json.loads(path.read_text()))
    except (OSError, ValueError, KeyError, TypeError):
        logger.warning("Ignoring unreadable timer mirror at %s", path)
        return None


def _write_atomic(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2))
    os.replace(tmp, path)
