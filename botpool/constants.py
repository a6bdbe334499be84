"""
Configuration constants for the Twitch bot pool

Every constant can be overridden by setting an environment variable with the
same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The value to return if the variable is unset or invalid.

    Returns:
        The parsed integer value from the environment, or the default.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The value to return if the variable is unset or invalid.

    Returns:
        The parsed float value from the environment, or the default.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# IRC endpoint
IRC_SERVER = os.getenv("IRC_SERVER", "irc.chat.twitch.tv")
IRC_PORT = _get_env_int("IRC_PORT", 6667)

# IRC session timing
IRC_CONNECT_TIMEOUT_SECONDS = _get_env_float(
    "IRC_CONNECT_TIMEOUT_SECONDS", 10.0
)  # TCP connect bound for a send session
IRC_PROBE_TIMEOUT_SECONDS = _get_env_float(
    "IRC_PROBE_TIMEOUT_SECONDS", 10.0
)  # Whole connectivity probe bound
IRC_PROBE_READ_BYTES = _get_env_int(
    "IRC_PROBE_READ_BYTES", 2048
)  # Max bytes inspected for the welcome reply
IRC_JOIN_TIMEOUT_SECONDS = _get_env_float(
    "IRC_JOIN_TIMEOUT_SECONDS", 5.0
)  # Wait for 366 / End of /NAMES list
IRC_POST_JOIN_DELAY_SECONDS = _get_env_float(
    "IRC_POST_JOIN_DELAY_SECONDS", 1.0
)  # Pause between join confirmation and PRIVMSG
IRC_POST_SEND_DELAY_SECONDS = _get_env_float(
    "IRC_POST_SEND_DELAY_SECONDS", 2.0
)  # Pause after PRIVMSG before closing

# Scheduler
SCHEDULER_TICK_SECONDS = _get_env_float(
    "SCHEDULER_TICK_SECONDS", 1.0
)  # Driver tick period
SCHEDULE_MIN_INTERVAL_DEFAULT = _get_env_int(
    "SCHEDULE_MIN_INTERVAL_DEFAULT", 30
)  # Default lower bound between scheduled sends
SCHEDULE_MAX_INTERVAL_DEFAULT = _get_env_int(
    "SCHEDULE_MAX_INTERVAL_DEFAULT", 120
)  # Default upper bound between scheduled sends
SCHEDULE_MIN_INTERVAL_FLOOR = _get_env_float(
    "SCHEDULE_MIN_INTERVAL_FLOOR", 1.0
)  # Smallest interval ever rolled

# Multi-bot dispatch
BOT_DELAY_MIN_DEFAULT = _get_env_int(
    "BOT_DELAY_MIN_DEFAULT", 1
)  # Default stagger lower bound
BOT_DELAY_MAX_DEFAULT = _get_env_int(
    "BOT_DELAY_MAX_DEFAULT", 3
)  # Default stagger upper bound
SUBSET_COUNT_DEFAULT = _get_env_int(
    "SUBSET_COUNT_DEFAULT", 3
)  # Default number of bots for subset mode

# Runner
RUNNER_DRAIN_TIMEOUT_SECONDS = _get_env_float(
    "RUNNER_DRAIN_TIMEOUT_SECONDS", 30.0
)  # Max wait for in-flight sends on shutdown
