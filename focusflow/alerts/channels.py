"""
Alert channels — platform-aware desktop notification, sound and vibration.

Each channel does one thing and raises if it cannot start. Players and
notifiers are launched detached, so a long sound never holds up the caller.
Swallowing failures is the dispatcher's job, so a channel never decides
whether its error matters.
"""

from __future__ import annotations

import subprocess
import sys
from typing import Optional


class AlertUnavailable(Exception):
    """The channel cannot run on this host (unsupported API, no permission)."""


class DesktopNotificationChannel:

    def send(self, title: str, body: str) -> None:
        if sys.platform == "win32":
            self._windows_toast(title, body)
        elif sys.platform == "darwin":
            self._macos_notification(title, body)
        else:
            self._linux_notify_send(title, body)

    # ------------------------------------------------------------------
    # Platform implementations
    # ------------------------------------------------------------------

    def _windows_toast(self, title: str, body: str) -> None:
        script = (
            "[reflection.assembly]::loadwithpartialname('System.Windows.Forms') | Out-Null; "
            "$n = New-Object System.Windows.Forms.NotifyIcon; "
            "$n.Icon = [System.Drawing.SystemIcons]::Information; "
            "$n.Visible = $true; "
            f"$n.ShowBalloonTip(5000, {_ps_quote(title)}, {_ps_quote(body)}, 'Info')"
        )
        _run(["powershell", "-NoProfile", "-Command", script])

    def _macos_notification(self, title: str, body: str) -> None:
        script = f"display notification {_as_quote(body)} with title {_as_quote(title)}"
        _run(["osascript", "-e", script])

    def _linux_notify_send(self, title: str, body: str) -> None:
        _run(["notify-send", "--app-name=FocusFlow", title, body])


class SoundChannel:

    def __init__(self, sound_file: str = ""):
        self.sound_file = sound_file

    def play(self) -> None:
        if not self.sound_file:
            # terminal bell
            sys.stdout.write("\a")
            sys.stdout.flush()
            return
        if sys.platform == "win32":
            _run([
                "powershell", "-NoProfile", "-Command",
                f"(New-Object Media.SoundPlayer {_ps_quote(self.sound_file)}).PlaySync()",
            ])
        elif sys.platform == "darwin":
            _run(["afplay", self.sound_file])
        else:
            _run(["paplay", self.sound_file])


class VibrationChannel:
    """Haptics are only reachable through a host bridge (e.g. a mobile shell)."""

    def __init__(self, bridge: Optional[object] = None):
        self._bridge = bridge

    def vibrate(self, duration_ms: int = 200) -> None:
        if self._bridge is None or not hasattr(self._bridge, "vibrate"):
            raise AlertUnavailable("vibration is not supported on this host")
        self._bridge.vibrate(duration_ms)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run(cmd: list) -> subprocess.Popen:
    """Launch *cmd* detached and return at once; the caller never waits on it."""
    try:
        return subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except FileNotFoundError as exc:
        raise AlertUnavailable(f"{cmd[0]} is not installed") from exc


def _ps_quote(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


def _as_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
