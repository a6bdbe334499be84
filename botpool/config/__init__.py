"""Configuration package exports.

Settings models, environment/file loading and the runtime file watcher.
"""

from .loader import read_text_file, settings_from_env
from .model import DelayPolicy, RunnerSettings, ScheduleMode, ScheduleSettings
from .watcher import FileWatcher

__all__ = [
    "DelayPolicy",
    "FileWatcher",
    "RunnerSettings",
    "ScheduleMode",
    "ScheduleSettings",
    "read_text_file",
    "settings_from_env",
]
