"""
Focus Timer — work/break state machine with wall-clock elapsed time.

Remaining time is always recomputed as `total - (now - started_at)`; the
timer never counts ticks, so a suspended host or a missed pulse cannot
skew it. Completion side effects (session record, alerts) run exactly once
per session id, guarded by `TimerState.last_handled_session_id`, no matter
how many times tick() is re-evaluated after the zero-crossing.

Every public operation is total: invalid calls are no-ops and failures in
the store, alert or mirror collaborators are logged and swallowed.
"""

from __future__ import annotations

import dataclasses
import math
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..alerts.dispatcher import AlertDispatcher, AlertKind
from ..clock import utc_now
from ..logging_handler import setup_logger
from ..sessions.models import SessionKind, SessionRecord, normalise_category
from ..sessions.store import SessionLogStore
from ..settings import TimerSettings
from .mirror import MirrorWriter
from .state import RUNNING_PHASES, TimerPhase, TimerState

logger = setup_logger(__name__)


def _new_session_id() -> str:
    return str(uuid.uuid4())


class FocusTimer:

    def __init__(
        self,
        settings: TimerSettings,
        store: SessionLogStore,
        alerts: AlertDispatcher,
        mirror: Optional[MirrorWriter] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = _new_session_id,
    ):
        self._settings = settings
        self._store = store
        self._alerts = alerts
        self._mirror = mirror
        self._clock = clock
        self._new_id = id_factory
        self._state = TimerState.initial(settings.work_seconds)
        self._publish()

    @property
    def settings(self) -> TimerSettings:
        return self._settings

    @property
    def state(self) -> TimerState:
        """A copy of the current state; mutating it does not affect the timer."""
        return dataclasses.replace(self._state)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start(self, now: Optional[datetime] = None, category: Optional[str] = None) -> TimerState:
        s = self._state
        if s.phase is not TimerPhase.IDLE:
            logger.debug("start() ignored in phase %s", s.phase.value)
            return self.state
        now = now or self._clock()
        work = self._settings.work_seconds
        self._state = TimerState(
            phase=TimerPhase.WORK,
            remaining_seconds=work,
            total_seconds=work,
            current_cycle=s.current_cycle,
            started_at=now,
            session_id=self._new_id(),
            last_handled_session_id=s.last_handled_session_id,
            category=normalise_category(category),
        )
        logger.info(
            "Work interval started: cycle=%d session=%s", s.current_cycle, self._state.session_id
        )
        self._publish()
        return self.state

    def tick(self, now: Optional[datetime] = None) -> TimerState:
        s = self._state
        if s.phase not in RUNNING_PHASES or s.started_at is None:
            return self.state
        now = now or self._clock()
        s.remaining_seconds = self._remaining_at(now)
        if s.remaining_seconds == 0 and s.last_handled_session_id != s.session_id:
            s.last_handled_session_id = s.session_id
            self._complete(now)
        return self.state

    def pause(self, now: Optional[datetime] = None) -> TimerState:
        s = self._state
        if s.phase not in RUNNING_PHASES:
            logger.debug("pause() ignored in phase %s", s.phase.value)
            return self.state
        now = now or self._clock()
        s.remaining_seconds = self._remaining_at(now)
        self._record(now, completed=False)
        s.paused_from = s.phase
        s.phase = TimerPhase.PAUSED
        logger.info(
            "Paused %s with %ds remaining", s.paused_from.value, s.remaining_seconds
        )
        self._publish()
        return self.state

    def resume(self, now: Optional[datetime] = None) -> TimerState:
        s = self._state
        if s.phase is not TimerPhase.PAUSED:
            logger.debug("resume() ignored in phase %s", s.phase.value)
            return self.state
        now = now or self._clock()
        elapsed_so_far = s.total_seconds - s.remaining_seconds
        s.started_at = now - timedelta(seconds=elapsed_so_far)
        s.session_id = self._new_id()
        s.phase = s.paused_from or TimerPhase.WORK
        s.paused_from = None
        logger.info(
            "Resumed %s with %ds remaining: session=%s",
            s.phase.value, s.remaining_seconds, s.session_id,
        )
        self._publish()
        return self.state

    def skip(self, now: Optional[datetime] = None) -> TimerState:
        """Complete the running interval now; its record is marked completed."""
        s = self._state
        if s.phase not in RUNNING_PHASES:
            logger.debug("skip() ignored in phase %s", s.phase.value)
            return self.state
        now = now or self._clock()
        logger.info("Skipping %s interval: session=%s", s.phase.value, s.session_id)
        s.last_handled_session_id = s.session_id
        self._complete(now)
        return self.state

    def reset(self) -> TimerState:
        """Abandon everything and return to idle on cycle 1. Nothing is recorded."""
        self._state = TimerState.initial(self._settings.work_seconds)
        logger.info("Timer reset")
        self._publish()
        return self.state

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _remaining_at(self, now: datetime) -> int:
        s = self._state
        if s.started_at is None:
            return s.remaining_seconds
        elapsed = max(0, math.floor((now - s.started_at).total_seconds()))
        return max(0, s.total_seconds - elapsed)

    def _complete(self, now: datetime) -> None:
        s = self._state
        finished = s.phase
        self._record(now, completed=True)
        self._alert(
            AlertKind.WORK_COMPLETE if finished is TimerPhase.WORK else AlertKind.BREAK_COMPLETE
        )

        if finished is TimerPhase.WORK:
            is_long = s.current_cycle % self._settings.cycles_until_long == 0
            if is_long:
                phase, duration = TimerPhase.LONG_BREAK, self._settings.long_break_seconds
            else:
                phase, duration = TimerPhase.BREAK, self._settings.break_seconds
            self._state = TimerState(
                phase=phase,
                remaining_seconds=duration,
                total_seconds=duration,
                current_cycle=s.current_cycle,
                started_at=now,
                session_id=self._new_id(),
                last_handled_session_id=s.last_handled_session_id,
                category=s.category,
            )
        else:
            work = self._settings.work_seconds
            self._state = TimerState(
                phase=TimerPhase.IDLE,
                remaining_seconds=work,
                total_seconds=work,
                current_cycle=s.current_cycle + 1,
                last_handled_session_id=s.last_handled_session_id,
            )

        logger.info(
            "%s complete → %s (cycle %d)",
            finished.value, self._state.phase.value, self._state.current_cycle,
        )
        self._publish()

    def _record(self, now: datetime, completed: bool) -> None:
        s = self._state
        if s.session_id is None or s.started_at is None:
            return
        record = SessionRecord(
            id=s.session_id,
            started_at=s.started_at,
            ended_at=now,
            kind=SessionKind(s.phase.value),
            completed=completed,
            category=s.category,
        )
        try:
            self._store.append(record)
        except Exception:
            logger.exception("Failed to append session %s", record.id)

    def _alert(self, kind: AlertKind) -> None:
        try:
            self._alerts.notify(kind)
        except Exception:
            logger.exception("Alert dispatch for %s failed", kind.value)

    def _publish(self) -> None:
        if self._mirror is None:
            return
        try:
            self._mirror.publish(self._state)
        except Exception:
            logger.exception("Failed to publish timer mirror")
