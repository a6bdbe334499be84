"""Rendering of chat-log entries and recovering their bot name."""

from __future__ import annotations

RANDOM_MARKER = "🎲"
ERROR_MARKER = "❌ Error"


def format_sent_entry(name: str, message: str, randomized: bool) -> str:
    if randomized:
        return f"[{RANDOM_MARKER} {name}] {message}"
    return f"[{name}] {message}"


def format_error_entry(name: str, error: str | None) -> str:
    return f"{ERROR_MARKER} [{name}]: {error or 'unknown error'}"


def extract_bot_name(entry: str) -> str | None:
    """Bot name between the first ``[`` and the following ``]``, if any."""
    start = entry.find("[")
    if start < 0:
        return None
    end = entry.find("]", start + 1)
    if end < 0:
        return None
    name = entry[start + 1 : end].removeprefix(RANDOM_MARKER).strip()
    return name or None
