"""Runtime logging helpers."""

from __future__ import annotations

import os
import sys

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {extra[service]} | {message}"
_CONFIGURED_LEVEL: str | None = None


def _write_stderr(message: str) -> None:
    sys.stderr.write(message)


def resolve_level(*, debug: bool, level: str | None = None) -> str:
    """Warnings and errors always pass; info and debug only when debugging."""

    if level:
        return level.upper()
    env_level = os.getenv("QODO_BRIDGE_LOG_LEVEL")
    if env_level:
        return env_level.upper()
    return "DEBUG" if debug else "WARNING"


def configure_logging(*, debug: bool = False, level: str | None = None) -> None:
    """Configure the process-level stderr sink once per level."""

    global _CONFIGURED_LEVEL
    resolved = resolve_level(debug=debug, level=level)
    if resolved == _CONFIGURED_LEVEL:
        return

    # stdout belongs to the host, which renders it in its own UI.
    logger.remove()
    logger.configure(extra={"service": "qodo-bridge"})
    logger.add(
        _write_stderr,
        level=resolved,
        format=_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    _CONFIGURED_LEVEL = resolved
