"""IRC transport package.

Contains the line protocol helpers and the single-use session used for
connectivity probes and message sends.
"""

from .protocol import IRCMessage, build_privmsg, parse_irc_message  # noqa: F401
from .session import IRCSession, SendResult  # noqa: F401

__all__ = [
    "IRCMessage",
    "IRCSession",
    "SendResult",
    "build_privmsg",
    "parse_irc_message",
]
