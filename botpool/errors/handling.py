"""Error classification and logging helpers."""

from __future__ import annotations

import logging

from ..logs.logger import logger
from .internal import (
    AuthProbeInconclusiveError,
    ConnectFailedError,
    InternalError,
    JoinTimeoutError,
    WriteFailedError,
)


def classify_error(error: BaseException) -> str:
    """Map an exception onto a short error category used in log events."""
    if isinstance(error, ConnectFailedError):
        return "connect"
    if isinstance(error, JoinTimeoutError):
        return "join"
    if isinstance(error, WriteFailedError):
        return "write"
    if isinstance(error, AuthProbeInconclusiveError):
        return "probe"
    if isinstance(error, OSError | ConnectionError):
        return "network"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: BaseException,
    context: dict[str, object] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with its category and optional structured context.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level, ERROR by default.
    """
    ctx = dict(context or {})
    if isinstance(error, InternalError):
        for key, value in error.data.items():
            ctx.setdefault(key, value)
    logger.log_event(
        "error",
        classify_error(error),
        level=level,
        human=f"{message}: {error}",
        error_type=type(error).__name__,
        **ctx,
    )
