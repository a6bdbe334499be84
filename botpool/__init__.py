"""Twitch IRC bot pool: probe, dispatch and schedule chat messages."""

from .controller import BotPoolController, EventHooks, ProbeOutcome

__all__ = ["BotPoolController", "EventHooks", "ProbeOutcome"]
