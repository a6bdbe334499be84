"""Target selection and concurrent fan-out of chat sends."""

from .engine import DispatchEngine, PlannedSend, SendOutcome
from .entries import extract_bot_name, format_error_entry, format_sent_entry
from .intents import (
    AllBots,
    DispatchIntent,
    Origin,
    RandomBot,
    SingleBot,
    SubsetBots,
    Target,
)

__all__ = [
    "AllBots",
    "DispatchEngine",
    "DispatchIntent",
    "Origin",
    "PlannedSend",
    "RandomBot",
    "SendOutcome",
    "SingleBot",
    "SubsetBots",
    "Target",
    "extract_bot_name",
    "format_error_entry",
    "format_sent_entry",
]
