"""Error taxonomy and handling helpers."""

from .handling import classify_error, log_error
from .internal import (
    AuthProbeInconclusiveError,
    ConnectFailedError,
    InternalError,
    JoinTimeoutError,
    SessionError,
    WriteFailedError,
)

__all__ = [
    "InternalError",
    "SessionError",
    "ConnectFailedError",
    "AuthProbeInconclusiveError",
    "JoinTimeoutError",
    "WriteFailedError",
    "classify_error",
    "log_error",
]
