"""Credential and message-pool file parsing.

Credential files carry one bot per line, either ``token`` or
``token|displayName``. Bots without a usable name get ``bot_<n>`` from a
caller-owned ``NameCounter`` so names stay unique across reloads.
"""

from __future__ import annotations

from itertools import count

from ..logs.logger import logger
from .models import BotIdentity


class NameCounter:
    """Monotonic source of synthesized bot names (``bot_1``, ``bot_2``...)."""

    def __init__(self, start: int = 1) -> None:
        self._counter = count(start)

    def next_name(self) -> str:
        return f"bot_{next(self._counter)}"


def parse_credentials(text: str, counter: NameCounter) -> list[BotIdentity]:
    bots: list[BotIdentity] = []
    for line in text.splitlines():
        # Blank lines are the only malformed input; they yield no bot.
        if not line.strip():
            continue
        token, _, name_part = line.partition("|")
        name = name_part.strip() or counter.next_name()
        bots.append(BotIdentity(name=name, token=token.strip()))
    logger.log_event("credentials", "parsed", count=len(bots))
    return bots


def parse_message_pool(text: str) -> list[str]:
    """Return every non-blank line as a candidate chat message."""
    return [line for line in text.splitlines() if line.strip()]
