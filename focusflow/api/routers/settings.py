"""
/settings — read and update the persisted Pomodoro settings.

The running timer keeps the settings it was built with; a PUT here is
picked up by the next timer instance (i.e. after a restart).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from ...settings import DEFAULTS, get_settings, update_settings

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsPatch(BaseModel):
    workMinutes:          Optional[int]  = Field(None, ge=1, le=240)
    breakMinutes:         Optional[int]  = Field(None, ge=1, le=120)
    longBreakMinutes:     Optional[int]  = Field(None, ge=1, le=240)
    cyclesUntilLong:      Optional[int]  = Field(None, ge=1, le=12)
    sound:                Optional[bool] = None
    desktopNotifications: Optional[bool] = None
    vibration:            Optional[bool] = None


def _active(request: Request):
    return request.app.state.timer.settings.to_mapping()


@router.get("")
def read_settings(request: Request):
    """Persisted settings, their defaults, and the values the running timer uses."""
    return {"settings": get_settings(), "defaults": DEFAULTS, "active": _active(request)}


@router.put("")
def write_settings(patch: SettingsPatch, request: Request):
    """Apply a partial update and persist it. The running timer is not affected."""
    data = {k: v for k, v in patch.model_dump().items() if v is not None}
    return {"settings": update_settings(data), "active": _active(request)}
