"""Reading credential/message files and environment-based settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from ..logs.logger import logger
from .model import RunnerSettings

_TRUE_VALUES = ("true", "1", "yes", "on")


def read_text_file(path: str | os.PathLike[str]) -> str:
    """Return the UTF-8 contents of ``path``; a missing file reads as empty."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.log_event("config", "file_missing", level=logging.WARNING, path=str(p))
        return ""
    except (OSError, UnicodeDecodeError) as e:
        logger.log_event(
            "config",
            "file_read_error",
            level=logging.ERROR,
            path=str(p),
            error=str(e),
        )
        return ""
    logger.log_event(
        "config", "file_loaded", level=logging.DEBUG, path=str(p), size=len(text)
    )
    return text


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None:
        return None
    return value.strip().lower() in _TRUE_VALUES


def settings_from_env(overrides: dict[str, Any] | None = None) -> RunnerSettings:
    """Build RunnerSettings from ``BOTPOOL_*`` variables, then apply overrides.

    ``overrides`` uses the same nested shape as the model; ``None`` values are
    ignored so CLI flags that were not given leave the environment in charge.
    """
    data: dict[str, Any] = {"schedule": {}, "delay": {}}
    env_map = {
        "BOTPOOL_BOTS_FILE": ("bots_file",),
        "BOTPOOL_MESSAGES_FILE": ("messages_file",),
        "BOTPOOL_CHANNEL": ("channel",),
        "BOTPOOL_MIN_INTERVAL": ("schedule", "min_interval"),
        "BOTPOOL_MAX_INTERVAL": ("schedule", "max_interval"),
        "BOTPOOL_MODE": ("schedule", "mode"),
        "BOTPOOL_SUBSET_COUNT": ("schedule", "subset_count"),
        "BOTPOOL_MIN_DELAY": ("delay", "min_delay"),
        "BOTPOOL_MAX_DELAY": ("delay", "max_delay"),
    }
    for env_name, path in env_map.items():
        value = os.environ.get(env_name)
        if value is not None:
            _assign(data, path, value)
    if (staggered := _env_flag("BOTPOOL_STAGGERED")) is not None:
        data["delay"]["simultaneous"] = not staggered
    _merge(data, overrides or {})
    return RunnerSettings.model_validate(data)


def _assign(data: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    target = data
    for key in path[:-1]:
        target = target.setdefault(key, {})
    target[path[-1]] = value


def _merge(data: dict[str, Any], overrides: dict[str, Any]) -> None:
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict):
            _merge(data.setdefault(key, {}), value)
        else:
            data[key] = value
