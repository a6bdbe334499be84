"""Centralized internal error hierarchy.

Classes:
  InternalError               – Base for all internal errors.
  SessionError                – Base for failures inside one IRC session.
  ConnectFailedError          – DNS / TCP connection failure.
  AuthProbeInconclusiveError  – Probe got no definite answer (timeout, garbage).
  JoinTimeoutError            – Channel join not confirmed within the bound.
  WriteFailedError            – Socket write failed at any protocol step.

Session errors never escape the IRC session: they are converted into a
failed ``SendResult`` (or a ``False`` probe) at that boundary.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class SessionError(InternalError):
    """Failure of a single fire-and-close IRC session."""


class ConnectFailedError(SessionError):
    """The TCP connection could not be opened or was lost while reading."""


class AuthProbeInconclusiveError(SessionError):
    """The connectivity probe ended without a welcome or a login failure.

    Treated as "unavailable", never as a hard error.
    """


class JoinTimeoutError(SessionError):
    """Join confirmation (366 / End of /NAMES list) never arrived."""


class WriteFailedError(SessionError):
    """Writing a protocol line to the socket failed."""


__all__ = [
    "InternalError",
    "SessionError",
    "ConnectFailedError",
    "AuthProbeInconclusiveError",
    "JoinTimeoutError",
    "WriteFailedError",
]
