"""Dispatch intents: who sends, what, and where."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Origin(StrEnum):
    USER = "user"
    SCHEDULER = "scheduler"


@dataclass(frozen=True, slots=True)
class SingleBot:
    index: int


@dataclass(frozen=True, slots=True)
class RandomBot:
    pass


@dataclass(frozen=True, slots=True)
class AllBots:
    pass


@dataclass(frozen=True, slots=True)
class SubsetBots:
    count: int
    distinct_messages: bool = True


Target = SingleBot | RandomBot | AllBots | SubsetBots


@dataclass(frozen=True, slots=True)
class DispatchIntent:
    """One dispatch request, built per call and never stored.

    ``pool`` holds candidate messages for per-target assignment in subset
    mode; every other target sends ``message``.
    """

    target: Target
    message: str
    channel: str
    pool: tuple[str, ...] = ()
    origin: Origin = Origin.USER

    @property
    def randomized(self) -> bool:
        """True when the bot or the message was picked by chance."""
        return self.origin is Origin.SCHEDULER or isinstance(
            self.target, RandomBot | SubsetBots
        )
