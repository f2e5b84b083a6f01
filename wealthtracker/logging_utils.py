"""Mini README: Application-wide logging helpers for WealthTracker.

Structure:
    * configure_root_logger - installs a single console handler.
    * get_logger - module logger factory that guarantees the handler exists.

Usage:
    Every module creates ``LOGGER = get_logger(__name__)``. The root handler
    is attached once per process so reloading modules under uvicorn's
    auto-reload does not duplicate log lines.
"""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER_INITIALISED = False


def configure_root_logger(level: int = logging.INFO) -> None:
    """Configure the root logger with a timestamped console formatter."""

    global _LOGGER_INITIALISED
    if _LOGGER_INITIALISED:
        logging.getLogger().setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def level_for_environment(environment: str) -> int:
    """Map an environment label onto a logging level."""

    return logging.DEBUG if environment.strip().lower() in {"dev", "development"} else logging.INFO


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    configure_root_logger()
    return logging.getLogger(name)
