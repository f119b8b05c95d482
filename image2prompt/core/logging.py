"""Centralised Loguru configuration.

Call setup_logger() once at startup. Repeated calls are no-ops. Only a stderr
sink is installed; the app never writes log files.
"""

from __future__ import annotations

import sys
from typing import Optional

from loguru import logger

from .settings import settings

_INITIALISED = False


def setup_logger(level: Optional[str] = None) -> None:
    """Configure Loguru sinks once per process.

    If *level* is None the value of ``settings.log_level`` is used.
    """

    global _INITIALISED
    if _INITIALISED:
        return

    level = (level or settings.log_level).upper()

    logger.remove()  # drop the default stderr sink
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - <level>{message}</level>",
        colorize=True,
    )
    logger.info("Logger initialised (level: {})", level)

    _INITIALISED = True
