"""In-memory bot registry.

Only the driver mutates the registry. Send and probe tasks report back
through the controller's result queue and never touch it directly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from ..logs.logger import logger
from .credentials import NameCounter, parse_credentials
from .models import BotEntry, BotIdentity


class BotRegistry:
    """Ordered bot list plus runtime state, addressed by index.

    Out-of-range indices are ignored by every mutator so stale collaborator
    commands are harmless. ``generation`` increases on every wholesale
    replacement; results carrying an older generation belong to bots that no
    longer exist.
    """

    def __init__(self, counter: NameCounter | None = None) -> None:
        self.counter = counter or NameCounter()
        self._bots: list[BotEntry] = []
        self.generation = 0

    def __len__(self) -> int:
        return len(self._bots)

    def __iter__(self) -> Iterator[BotEntry]:
        return iter(self._bots)

    def get(self, index: int) -> BotEntry | None:
        if 0 <= index < len(self._bots):
            return self._bots[index]
        return None

    def load_text(self, text: str) -> list[BotIdentity]:
        """Parse credential text with this registry's counter and replace all bots."""
        identities = parse_credentials(text, self.counter)
        self.replace_all(identities)
        return identities

    def replace_all(self, identities: Iterable[BotIdentity]) -> None:
        self._bots = [BotEntry(identity) for identity in identities]
        self.generation += 1
        logger.log_event(
            "registry",
            "replaced",
            count=len(self._bots),
            generation=self.generation,
        )

    def set_available(self, index: int, available: bool) -> bool:
        entry = self.get(index)
        if entry is None:
            return False
        entry.state.available = available
        return True

    def set_enabled(self, index: int, enabled: bool) -> bool:
        entry = self.get(index)
        if entry is None:
            return False
        entry.state.enabled = enabled
        logger.log_event(
            "registry",
            "enabled_changed",
            level=logging.DEBUG,
            user=entry.name,
            enabled=enabled,
        )
        return True

    def append_history(self, index: int, entry_text: str) -> bool:
        entry = self.get(index)
        if entry is None:
            return False
        entry.state.history.append(entry_text)
        return True

    def clear_history(self, index: int) -> bool:
        entry = self.get(index)
        if entry is None:
            return False
        entry.state.history.clear()
        return True

    def clear_all_histories(self) -> None:
        for entry in self._bots:
            entry.state.history.clear()

    def eligible_indices(self) -> list[int]:
        return [i for i, entry in enumerate(self._bots) if entry.state.eligible]

    def filtered(self, query: str) -> list[tuple[int, BotEntry]]:
        """Bots whose name contains ``query`` (case-insensitive), with their index."""
        if not query:
            return list(enumerate(self._bots))
        needle = query.lower()
        return [
            (i, entry)
            for i, entry in enumerate(self._bots)
            if needle in entry.name.lower()
        ]

    def find_by_name(self, name: str) -> int | None:
        # Duplicate names are allowed; the first one wins.
        for i, entry in enumerate(self._bots):
            if entry.name == name:
                return i
        return None
