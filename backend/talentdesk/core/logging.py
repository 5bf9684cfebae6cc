"""Loguru sinks for the client core.

Every record carries ``user_id`` and ``query_key`` extras (``-`` when
unbound) so file logs can be grepped per session or per cache key.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from talentdesk.core.config import Settings, settings as default_settings

ROTATE_AT_BYTES = 500 * 1024 * 1024

_CONTEXT_DEFAULTS = {"user_id": "-", "query_key": "-"}

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> | "
    "user=<magenta>{extra[user_id]}</magenta> "
    "key=<cyan>{extra[query_key]}</cyan> - "
    "<level>{message}</level>"
)

_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | "
    "user_id={extra[user_id]} query_key={extra[query_key]} - {message}"
)


def _rotate_daily_or_oversized(message: Any, file: Any) -> bool:
    """Start a new file on a new calendar day or past ``ROTATE_AT_BYTES``."""
    file_day = Path(file.name).stem.rsplit("_", 1)[-1]
    if message.record["time"].strftime("%Y-%m-%d") != file_day:
        return True
    return file.tell() >= ROTATE_AT_BYTES


def _resolve_level(log_level: str | None, settings: Settings) -> str:
    if settings.DEBUG:
        return "DEBUG"
    return (log_level or settings.LOG_LEVEL).upper()


def setup_logging(log_level: str | None = None, settings: Settings | None = None) -> None:
    """Replace the default Loguru handler with console and file sinks.

    Args:
        log_level: Minimum level for the console and ``app_*`` file.
            Falls back to ``LOG_LEVEL``; ``DEBUG=true`` forces ``DEBUG``.
        settings: Source of ``LOG_DIR`` and ``DEBUG``. Defaults to the
            process-wide settings.
    """
    config = settings or default_settings
    level = _resolve_level(log_level, config)
    log_dir = Path(config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra=dict(_CONTEXT_DEFAULTS))

    logger.add(
        sys.stdout,
        level=level,
        format=_CONSOLE_FORMAT,
        colorize=True,
        enqueue=True,
        backtrace=config.DEBUG,
        diagnose=config.DEBUG,
    )

    file_sinks: tuple[tuple[str, str, Any, str, bool], ...] = (
        ("app", level, _rotate_daily_or_oversized, "30 days", False),
        ("errors", "ERROR", "100 MB", "90 days", True),
    )
    for prefix, sink_level, rotation, retention, backtrace in file_sinks:
        logger.add(
            log_dir / f"{prefix}_{{time:YYYY-MM-DD}}.log",
            level=sink_level,
            format=_FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression="zip",
            enqueue=True,
            backtrace=backtrace,
            diagnose=config.DEBUG and backtrace,
        )


__all__ = ["setup_logging"]
