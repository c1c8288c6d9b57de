"""
Alert Dispatcher — best-effort, fire-and-forget completion alerts.

Every enabled channel is attempted independently. A failing channel is
logged and skipped; notify() itself never raises.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional

from ..logging_handler import setup_logger
from ..settings import TimerSettings
from .channels import (
    AlertUnavailable,
    DesktopNotificationChannel,
    SoundChannel,
    VibrationChannel,
)

logger = setup_logger(__name__)

VIBRATION_MS = 200


class AlertKind(str, Enum):
    WORK_COMPLETE = "work-complete"
    BREAK_COMPLETE = "break-complete"


MESSAGES = {
    AlertKind.WORK_COMPLETE:  ("Pomodoro complete!", "Time to take a break."),
    AlertKind.BREAK_COMPLETE: ("Break over", "Ready to get back to focus?"),
}


class AlertDispatcher:

    def __init__(
        self,
        settings: TimerSettings,
        notifier: Optional[DesktopNotificationChannel] = None,
        sound: Optional[SoundChannel] = None,
        vibrator: Optional[VibrationChannel] = None,
    ):
        self._settings = settings
        self._notifier = notifier or DesktopNotificationChannel()
        self._sound = sound or SoundChannel()
        self._vibrator = vibrator or VibrationChannel()

    def notify(self, kind: AlertKind) -> List[str]:
        """Fire every enabled channel; return the names of those that succeeded."""
        try:
            kind = AlertKind(kind)
        except ValueError:
            logger.warning("Unknown alert kind %r, nothing sent", kind)
            return []

        title, body = MESSAGES[kind]
        fired: List[str] = []
        if self._settings.desktop_notifications:
            self._attempt(fired, "notification", lambda: self._notifier.send(title, body))
        if self._settings.sound:
            self._attempt(fired, "sound", self._sound.play)
        if self._settings.vibration:
            self._attempt(fired, "vibration", lambda: self._vibrator.vibrate(VIBRATION_MS))

        logger.debug("Alert %s dispatched via %s", kind.value, fired or "no channels")
        return fired

    def _attempt(self, fired: List[str], name: str, fn: Callable[[], None]) -> None:
        try:
            fn()
        except AlertUnavailable as exc:
            logger.warning("Alert channel %s unavailable: %s", name, exc)
        except Exception:
            logger.exception("Alert channel %s failed", name)
        else:
            fired.append(name)
