"""
/timer — drive the focus timer and watch its mirror.

Handlers are `async def` so they run on the event loop thread, the same
thread the clock pulse ticks the timer on. The timer is never touched from
the worker threadpool.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, WebSocket, WebSocketDisconnect

from ...api.schemas import MirrorSnapshotOut, StartRequest, TimerStateOut

router = APIRouter(prefix="/timer", tags=["timer"])


def _get_timer(request: Request):
    return request.app.state.timer


def _get_mirror(request: Request):
    return request.app.state.mirror


@router.get("", response_model=TimerStateOut)
async def get_timer(timer=Depends(_get_timer)):
    """Re-evaluate the countdown and return the live state."""
    return TimerStateOut.from_state(timer.tick())


@router.post("/start", response_model=TimerStateOut)
async def start_timer(req: Optional[StartRequest] = None, timer=Depends(_get_timer)):
    category = req.category if req else None
    return TimerStateOut.from_state(timer.start(category=category))


@router.post("/pause", response_model=TimerStateOut)
async def pause_timer(timer=Depends(_get_timer)):
    return TimerStateOut.from_state(timer.pause())


@router.post("/resume", response_model=TimerStateOut)
async def resume_timer(timer=Depends(_get_timer)):
    return TimerStateOut.from_state(timer.resume())


@router.post("/skip", response_model=TimerStateOut)
async def skip_timer(timer=Depends(_get_timer)):
    return TimerStateOut.from_state(timer.skip())


@router.post("/reset", response_model=TimerStateOut)
async def reset_timer(timer=Depends(_get_timer)):
    return TimerStateOut.from_state(timer.reset())


@router.get("/mirror", response_model=MirrorSnapshotOut)
async def get_mirror(mirror=Depends(_get_mirror)):
    """Last snapshot the timer published (advisory, display only)."""
    snapshot = mirror.snapshot()
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No timer snapshot published yet")
    return MirrorSnapshotOut(**snapshot.to_dict())


@router.websocket("/ws")
async def timer_websocket(websocket: WebSocket):
    """
    WebSocket stream — sends the current mirror snapshot, then one message
    per transition. Dashboards subscribe to this instead of owning a timer.
    """
    mirror = websocket.app.state.mirror
    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = mirror.subscribe(queue.put_nowait)
    try:
        current = mirror.snapshot()
        if current is not None:
            await websocket.send_json(current.to_dict())
        while True:
            snapshot = await queue.get()
            await websocket.send_json(snapshot.to_dict())
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
