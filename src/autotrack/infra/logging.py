"""Logging utilities for autotrack."""

from __future__ import annotations

import logging
import sys

from loguru import logger


class InterceptHandler(logging.Handler):
    """Forward stdlib records (requests, urllib3) to loguru at their call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, "[{}] {}", record.name, record.getMessage())


def setup_logging(level: str = "INFO", bridge_stdlib: bool = True) -> None:
    """Configure application-wide logging.

    Args:
        level: Minimum level for the loguru sink.
        bridge_stdlib: When True, route stdlib logging records into loguru so
            everything shares one sink.
    """
    logger.remove()
    logger.add(sys.stderr, level=level)

    if bridge_stdlib:
        logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO, force=True)
