from __future__ import annotations

import sys

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def log_api_error(context: str, exc: Exception) -> None:
    logger.error("Remote API error in {}: {}", context, exc)
