"""
Shared pytest fixtures and configuration.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import focusflow.settings as settings_mod
from focusflow.api.app import create_app
from focusflow.settings import TimerSettings

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


class RecordingStore:
    """In-memory stand-in for SessionLogStore."""

    def __init__(self):
        self.records = []

    def append(self, record) -> None:
        self.records.append(record)

    def read_all(self):
        return list(self.records)


class FailingStore(RecordingStore):
    def append(self, record) -> None:
        self.attempts = getattr(self, "attempts", 0) + 1
        raise OSError("disk full")


class RecordingAlerts:
    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def notify(self, kind):
        self.calls.append(kind)
        if self.fail:
            raise RuntimeError("alert backend exploded")
        return []


def counting_ids(prefix: str = "s"):
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def alerts():
    return RecordingAlerts()


@pytest.fixture
def timer_settings():
    return TimerSettings(work_minutes=25, break_minutes=5, long_break_minutes=15, cycles_until_long=4)


@pytest.fixture()
def tmp_settings_file(tmp_path: Path, monkeypatch):
    """
    Redirect the settings store to a fresh temp file for each test.
    Also resets the in-memory cache so each test starts clean.
    """
    fake_file = tmp_path / "pomodoro_settings.json"
    monkeypatch.setattr(settings_mod, "_FILE", fake_file)
    monkeypatch.setattr(settings_mod, "_current", {})
    yield fake_file
    monkeypatch.setattr(settings_mod, "_current", {})


@pytest.fixture()
def app(tmp_path, tmp_settings_file, clock, alerts, timer_settings):
    """A fresh app with a fake clock, no background pulse, and temp storage."""
    return create_app(
        data_dir=tmp_path / "data",
        timer_settings=timer_settings,
        alerts=alerts,
        clock=clock,
        id_factory=counting_ids(),
        run_clock=False,
    )


@pytest_asyncio.fixture()
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
