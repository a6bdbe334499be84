"""Utility helpers shared across the bot pool."""

from .helpers import format_duration
from .tasks import BackgroundTasks

__all__ = ["BackgroundTasks", "format_duration"]
