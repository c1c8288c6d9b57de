"""
Central configuration for the FocusFlow timer service.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    # Clock
    tick_interval_ms: int = 1000             # clock pulse cadence

    # Storage
    data_dir: Path = field(default_factory=lambda: _ROOT / "data")
    sessions_db: str = "sessions.db"
    settings_file: str = "pomodoro_settings.json"
    mirror_file: str = "timer_state.json"

    # Logging
    log_level: str = "INFO"
    log_file: str = "focusflow.log"

    # Alerts
    sound_file: str = ""                     # empty → platform default chime

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls) -> "Config":
        cfg = cls()
        if _CONFIG_FILE.exists():
            overrides = json.loads(_CONFIG_FILE.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (FOCUSFLOW_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"FOCUSFLOW_{k.upper()}"
            if env_key in os.environ:
                setattr(cfg, k, type(getattr(cfg, k))(os.environ[env_key]))
        cfg.data_dir = Path(cfg.data_dir)
        cfg.data_dir.mkdir(parents=True, exist_ok=True)
        return cfg


# Module-level singleton
config = Config.load()
