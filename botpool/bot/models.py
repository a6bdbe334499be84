"""Bot identity and per-bot runtime state."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class BotIdentity:
    name: str
    token: str = field(repr=False)


@dataclass(slots=True)
class BotState:
    available: bool = False
    enabled: bool = True
    history: list[str] = field(default_factory=list)

    @property
    def eligible(self) -> bool:
        return self.available and self.enabled


@dataclass(slots=True)
class BotEntry:
    """Registry row pairing an identity with its runtime state."""

    identity: BotIdentity
    state: BotState = field(default_factory=BotState)

    @property
    def name(self) -> str:
        return self.identity.name
