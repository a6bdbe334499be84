"""IRC line building and classification for the Twitch chat server."""

from __future__ import annotations

from dataclasses import dataclass

WELCOME_NUMERIC = "001"
END_OF_NAMES_NUMERIC = "366"
END_OF_NAMES_TEXT = "End of /NAMES list"
WELCOME_TEXT = "Welcome"
AUTH_FAILURE_TEXTS = ("Login authentication failed", "Login unsuccessful")


@dataclass
class IRCMessage:
    raw: str
    prefix: str | None
    command: str | None
    params: str


def parse_irc_message(raw_line: str) -> IRCMessage:
    """Split a raw line into prefix, command and params.

    Tags (``@...``) are skipped; Twitch capabilities are never requested so
    they only show up on unusual servers.
    """
    original = raw_line
    line = raw_line.rstrip("\r\n")
    prefix: str | None = None
    command: str | None = None
    params = ""

    if line.startswith("@"):
        line = line.split(" ", 1)[1] if " " in line else ""

    if line.startswith(":"):
        remainder = line[1:]
        if " " in remainder:
            prefix, line = remainder.split(" ", 1)
        else:
            prefix, line = remainder, ""

    trailing = ""
    if " :" in line:
        line, trailing = line.split(" :", 1)

    parts = line.split()
    if parts:
        command = parts[0].upper()
        middle = " ".join(parts[1:])
        params = f"{middle} {trailing}".strip() if trailing else middle

    return IRCMessage(raw=original, prefix=prefix, command=command, params=params)


def normalize_oauth(token: str) -> str:
    token = token.strip()
    return token if token.startswith("oauth:") else f"oauth:{token}"


def normalize_channel(channel: str) -> str:
    return channel.strip().lstrip("#").lower()


def build_pass(token: str) -> str:
    return f"PASS {normalize_oauth(token)}"


def build_nick(name: str) -> str:
    return f"NICK {name}"


def build_join(channel: str) -> str:
    return f"JOIN #{normalize_channel(channel)}"


def build_privmsg(channel: str, message: str) -> str:
    # A raw newline would smuggle a second command onto the wire.
    text = " ".join(message.splitlines())
    return f"PRIVMSG #{normalize_channel(channel)} :{text}"


def build_pong(ping_line: str) -> str:
    return ping_line.rstrip("\r\n").replace("PING", "PONG", 1)


def is_ping(line: str) -> bool:
    return line.startswith("PING")


def is_welcome(response: str) -> bool:
    if WELCOME_TEXT in response:
        return True
    return any(
        parse_irc_message(line).command == WELCOME_NUMERIC
        for line in response.splitlines()
    )


def is_auth_failure(response: str) -> bool:
    return any(text in response for text in AUTH_FAILURE_TEXTS)


def is_join_confirmation(line: str) -> bool:
    if END_OF_NAMES_TEXT in line:
        return True
    return parse_irc_message(line).command == END_OF_NAMES_NUMERIC


def redact(line: str) -> str:
    """Hide the credential of a PASS line for logging."""
    if line.startswith("PASS "):
        return "PASS oauth:***"
    return line
