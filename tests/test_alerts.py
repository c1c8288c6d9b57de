"""
Tests for the alert dispatcher and its channels.
"""

from __future__ import annotations

import subprocess

import pytest

from focusflow.alerts import channels as channels_mod
from focusflow.alerts.channels import AlertUnavailable, SoundChannel, VibrationChannel
from focusflow.alerts.dispatcher import VIBRATION_MS, AlertDispatcher, AlertKind
from focusflow.settings import TimerSettings


class FakeNotifier:
    def __init__(self, exc=None):
        self.sent = []
        self.exc = exc

    def send(self, title, body):
        self.sent.append((title, body))
        if self.exc is not None:
            raise self.exc


class FakeSound:
    def __init__(self, exc=None):
        self.plays = 0
        self.exc = exc

    def play(self):
        self.plays += 1
        if self.exc is not None:
            raise self.exc


class FakeBridge:
    def __init__(self):
        self.calls = []

    def vibrate(self, ms):
        self.calls.append(ms)


ALL_ON = TimerSettings(sound=True, desktop_notifications=True, vibration=True)


def _dispatcher(settings=ALL_ON, notifier=None, sound=None, bridge=None):
    return AlertDispatcher(
        settings,
        notifier=notifier or FakeNotifier(),
        sound=sound or FakeSound(),
        vibrator=VibrationChannel(bridge),
    )


class TestToggles:
    def test_everything_off_fires_nothing(self):
        notifier, sound, bridge = FakeNotifier(), FakeSound(), FakeBridge()
        d = _dispatcher(TimerSettings(), notifier, sound, bridge)
        assert d.notify(AlertKind.WORK_COMPLETE) == []
        assert notifier.sent == []
        assert sound.plays == 0
        assert bridge.calls == []

    def test_all_enabled_channels_fire(self):
        notifier, sound, bridge = FakeNotifier(), FakeSound(), FakeBridge()
        d = _dispatcher(ALL_ON, notifier, sound, bridge)
        assert d.notify(AlertKind.WORK_COMPLETE) == ["notification", "sound", "vibration"]
        assert notifier.sent == [("Pomodoro complete!", "Time to take a break.")]
        assert sound.plays == 1
        assert bridge.calls == [VIBRATION_MS]

    def test_only_sound_enabled(self):
        notifier, sound = FakeNotifier(), FakeSound()
        d = _dispatcher(TimerSettings(sound=True), notifier, sound, FakeBridge())
        assert d.notify(AlertKind.BREAK_COMPLETE) == ["sound"]
        assert notifier.sent == []

    def test_break_complete_message(self):
        notifier = FakeNotifier()
        d = _dispatcher(TimerSettings(desktop_notifications=True), notifier)
        d.notify(AlertKind.BREAK_COMPLETE)
        assert notifier.sent == [("Break over", "Ready to get back to focus?")]

    def test_kind_accepts_plain_string(self):
        d = _dispatcher(TimerSettings(sound=True))
        assert d.notify("work-complete") == ["sound"]


class TestBestEffort:
    def test_failing_channel_does_not_block_the_rest(self):
        sound = FakeSound()
        bridge = FakeBridge()
        d = _dispatcher(ALL_ON, FakeNotifier(exc=RuntimeError("dbus down")), sound, bridge)
        assert d.notify(AlertKind.WORK_COMPLETE) == ["sound", "vibration"]
        assert sound.plays == 1
        assert bridge.calls == [VIBRATION_MS]

    def test_unavailable_vibration_is_skipped(self):
        d = _dispatcher(ALL_ON, bridge=None)
        assert d.notify(AlertKind.WORK_COMPLETE) == ["notification", "sound"]

    def test_every_channel_failing_still_returns(self):
        d = _dispatcher(
            ALL_ON,
            FakeNotifier(exc=AlertUnavailable("no permission")),
            FakeSound(exc=OSError("no audio device")),
            None,
        )
        assert d.notify(AlertKind.WORK_COMPLETE) == []

    def test_unknown_kind_sends_nothing(self):
        notifier = FakeNotifier()
        d = _dispatcher(ALL_ON, notifier)
        assert d.notify("lunch-time") == []
        assert notifier.sent == []


class TestChannels:
    def test_vibration_without_bridge_is_unavailable(self):
        with pytest.raises(AlertUnavailable):
            VibrationChannel().vibrate(100)

    def test_vibration_uses_bridge(self):
        bridge = FakeBridge()
        VibrationChannel(bridge).vibrate(150)
        assert bridge.calls == [150]

    def test_sound_without_file_rings_bell(self, capsys):
        SoundChannel().play()
        assert capsys.readouterr().out == "\a"

    def test_missing_binary_is_unavailable(self, monkeypatch):
        def _missing(*args, **kwargs):
            raise FileNotFoundError("notify-send")

        monkeypatch.setattr(channels_mod.subprocess, "Popen", _missing)
        with pytest.raises(AlertUnavailable):
            channels_mod._run(["notify-send", "hi"])

    def test_launch_failure_propagates(self, monkeypatch):
        def _denied(*args, **kwargs):
            raise PermissionError("paplay")

        monkeypatch.setattr(channels_mod.subprocess, "Popen", _denied)
        with pytest.raises(PermissionError):
            channels_mod._run(["paplay", "x.wav"])


class NeverFinishingProcess:
    """Child process that is still running; waiting on it is a bug."""

    launched = []

    def __init__(self, cmd, **kwargs):
        self.cmd = cmd
        self.kwargs = kwargs
        self.returncode = None
        NeverFinishingProcess.launched.append(self)

    def wait(self, timeout=None):
        raise AssertionError("alert channel waited on its child process")

    communicate = wait


class TestDetachedLaunch:
    @pytest.fixture(autouse=True)
    def _fake_popen(self, monkeypatch):
        NeverFinishingProcess.launched = []
        monkeypatch.setattr(channels_mod.subprocess, "Popen", NeverFinishingProcess)
        monkeypatch.setattr(channels_mod.sys, "platform", "linux")

    def test_sound_file_is_played_detached(self):
        SoundChannel("chime.wav").play()
        [proc] = NeverFinishingProcess.launched
        assert proc.cmd == ["paplay", "chime.wav"]
        assert proc.kwargs["stdout"] is subprocess.DEVNULL
        assert proc.kwargs["stderr"] is subprocess.DEVNULL

    def test_notify_returns_while_players_still_run(self):
        d = AlertDispatcher(
            TimerSettings(sound=True, desktop_notifications=True),
            sound=SoundChannel("long-chime.wav"),
        )
        assert d.notify(AlertKind.WORK_COMPLETE) == ["notification", "sound"]
        assert [p.cmd[0] for p in NeverFinishingProcess.launched] == ["notify-send", "paplay"]
        assert all(p.returncode is None for p in NeverFinishingProcess.launched)
