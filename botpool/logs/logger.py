"""Structured event logger for the bot pool."""

from __future__ import annotations

import logging
import os
import sys

import colorlog

_PREFIX_WIDTH = 24
_EVENT_WIDTH = 32


def _debug_enabled() -> bool:
    return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")


def build_formatter() -> logging.Formatter:
    """Console formatter shared by BotLogger and the runner."""
    return colorlog.ColoredFormatter(
        "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "magenta",
        },
        secondary_log_colors={
            "message": {
                "ERROR": "red",
                "CRITICAL": "magenta",
            }
        },
        reset=True,
    )


class BotLogger:
    """Domain/action event logger.

    ``log_event("irc", "join_timeout", user=..., channel=...)`` looks up a human
    template for ``(domain, action)`` in the event catalog and renders it with
    the keyword context. ``user`` and ``channel`` feed the fixed-width prefix;
    everything else is shown as ``key=value`` context in debug mode only.
    """

    def __init__(self, name: str = "botpool") -> None:
        self.logger = logging.getLogger(name)
        self.logger.handlers.clear()
        self.logger.propagate = False
        self.logger.setLevel(logging.DEBUG if _debug_enabled() else logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(build_formatter())
        self.logger.addHandler(console_handler)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        event_name = f"{domain}_{action}".lower()
        human_text = human if human is not None else self._render(domain, action, kwargs)
        user = kwargs.pop("user", None)
        channel = kwargs.pop("channel", None)
        prefix = self._build_prefix(
            user if isinstance(user, str) else None,
            channel if isinstance(channel, str) else None,
        )
        if _debug_enabled():
            msg = self._build_debug_message(event_name, prefix, human_text, kwargs)
        else:
            msg = f"{prefix} {human_text}"
        self.logger.log(level, msg, exc_info=exc_info)

    @staticmethod
    def _render(domain: str, action: str, kwargs: dict[str, object]) -> str:
        # Local import keeps module init free of the catalog's JSON read order.
        from .event_catalog import EVENT_TEMPLATES

        template = EVENT_TEMPLATES.get((domain, action))
        if not template:
            return f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
        try:
            return template.format(**kwargs)
        except (KeyError, IndexError, ValueError):
            return template

    @staticmethod
    def _build_prefix(user: str | None, channel: str | None) -> str:
        core = f"{user or 'system'}#{channel}" if channel else (user or "system")
        return f"[{core.ljust(_PREFIX_WIDTH)[:_PREFIX_WIDTH]}]"

    @staticmethod
    def _build_debug_message(
        event_name: str, prefix: str, human_text: str, kwargs: dict[str, object]
    ) -> str:
        if len(event_name) <= _EVENT_WIDTH:
            ev = event_name.ljust(_EVENT_WIDTH)
        else:
            ev = event_name[: _EVENT_WIDTH - 1] + "…"
        base = f"{ev} {prefix} {human_text}"
        context = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        return f"{base} ({context})" if context else base


logger = BotLogger()
