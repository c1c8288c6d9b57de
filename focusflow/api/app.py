"""
FastAPI application — local focus timer API.
Runs on http://127.0.0.1:8765 by default.

Singletons (store, mirror, timer, clock) live on app.state so that each
call to create_app() produces a fully independent instance with no shared
module-level globals. This makes test isolation straightforward.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..alerts.channels import SoundChannel
from ..alerts.dispatcher import AlertDispatcher
from ..clock import ClockSource, utc_now
from ..config import config
from ..logging_handler import setup_logger
from ..sessions.store import SessionLogStore
from ..settings import TimerSettings, load_timer_settings
from ..timer.machine import FocusTimer
from ..timer.mirror import MirrorChannel

logger = setup_logger(__name__)

VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Lifespan — initialises and tears down all per-app state
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    opts: Dict[str, Any] = app.state.options
    data_dir = Path(opts["data_dir"] or config.data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)

    # settings are read once here and frozen for this timer's lifetime
    settings: TimerSettings = opts["timer_settings"] or load_timer_settings()

    clock = ClockSource(
        interval_ms=config.tick_interval_ms,
        now_fn=opts["clock"] or utc_now,
    )
    store = SessionLogStore(data_dir / config.sessions_db)
    mirror = MirrorChannel(data_dir / config.mirror_file)
    alerts = opts["alerts"] or AlertDispatcher(settings, sound=SoundChannel(config.sound_file))

    timer_kwargs: Dict[str, Any] = {"mirror": mirror.claim_writer(), "clock": clock.now}
    if opts["id_factory"] is not None:
        timer_kwargs["id_factory"] = opts["id_factory"]
    timer = FocusTimer(settings, store, alerts, **timer_kwargs)

    clock.register_listener(timer.tick)

    app.state.clock = clock
    app.state.store = store
    app.state.mirror = mirror
    app.state.timer = timer

    clock_task = None
    if opts["run_clock"]:
        clock_task = asyncio.create_task(clock.run())
    logger.info("FocusFlow timer ready (data_dir=%s)", data_dir)

    yield

    if clock_task is not None:
        clock_task.cancel()
        try:
            await clock_task
        except asyncio.CancelledError:
            pass


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(
    data_dir: Optional[Path] = None,
    timer_settings: Optional[TimerSettings] = None,
    alerts: Optional[AlertDispatcher] = None,
    clock: Optional[Callable[[], datetime]] = None,
    id_factory: Optional[Callable[[], str]] = None,
    run_clock: bool = True,
) -> FastAPI:
    app = FastAPI(
        title="FocusFlow Timer",
        description="Local-first focus-interval timer with durable session history",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.options = {
        "data_dir": data_dir,
        "timer_settings": timer_settings,
        "alerts": alerts,
        "clock": clock,
        "id_factory": id_factory,
        "run_clock": run_clock,
    }

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routers import sessions, settings, timer

    app.include_router(timer.router)
    app.include_router(sessions.router)
    app.include_router(settings.router)

    @app.get("/health")
    async def health(request: Request):
        t = getattr(request.app.state, "timer", None)
        phase = t.state.phase.value if t is not None else "unknown"
        return {"status": "ok", "version": VERSION, "phase": phase}

    return app


app = create_app()
