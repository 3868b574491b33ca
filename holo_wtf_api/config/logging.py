"""Process-wide logging configuration."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def config_configure_logging(log_level: str = "info") -> None:
    """Configure root logging once per process.

    Uvicorn loggers are left without their own handlers so their records
    propagate to the root handler configured here.

    Args:
        log_level: Level name such as `info` or `debug`.

    Returns:
        None: Logging configuration is applied as a side effect.

    Raises:
        ValueError: Raised when the level name is unknown.
    """

    numeric_level = logging.getLevelName(log_level.strip().upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"unknown log level: {log_level!r}")

    logging.basicConfig(level=numeric_level, format=_LOG_FORMAT, force=True)
    for uvicorn_logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
