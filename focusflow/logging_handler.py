"""
Logger factory shared by every FocusFlow module.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import config


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: Optional[int] = None,
    console: bool = True,
) -> logging.Logger:
    """Configure and return a module-level logger."""
    log_dir = config.data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    full_log_file_path = log_dir / (log_file or config.log_file)

    if level is None:
        level = logging.getLevelName(config.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler = logging.FileHandler(full_log_file_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

    return logger
