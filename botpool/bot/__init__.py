"""Bot identities, credential parsing and the in-memory registry."""

from .credentials import NameCounter, parse_credentials, parse_message_pool
from .models import BotEntry, BotIdentity, BotState
from .registry import BotRegistry

__all__ = [
    "BotEntry",
    "BotIdentity",
    "BotRegistry",
    "BotState",
    "NameCounter",
    "parse_credentials",
    "parse_message_pool",
]
