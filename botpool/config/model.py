from __future__ import annotations

import random
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import (
    BOT_DELAY_MAX_DEFAULT,
    BOT_DELAY_MIN_DEFAULT,
    SCHEDULE_MAX_INTERVAL_DEFAULT,
    SCHEDULE_MIN_INTERVAL_DEFAULT,
    SUBSET_COUNT_DEFAULT,
)
from ..irc.protocol import normalize_channel


class ScheduleMode(StrEnum):
    RANDOM = "random"
    ALL = "all"
    SUBSET = "subset"


class DelayPolicy(BaseModel):
    """Inter-bot stagger used when one dispatch targets several bots.

    Attributes:
        simultaneous: Launch every send at once when True.
        min_delay: Lower bound in seconds of the per-step stagger.
        max_delay: Upper bound in seconds; raised to ``min_delay`` if lower.
    """

    simultaneous: bool = True
    min_delay: float = Field(default=BOT_DELAY_MIN_DEFAULT, ge=0)
    max_delay: float = Field(default=BOT_DELAY_MAX_DEFAULT, ge=0)

    @model_validator(mode="after")
    def clamp_bounds(self) -> DelayPolicy:
        if self.max_delay < self.min_delay:
            self.max_delay = self.min_delay
        return self

    def stagger(self, position: int, rng: random.Random) -> float:
        """Delay before the send at ``position`` (0-based) in selection order."""
        if self.simultaneous or position <= 0:
            return 0.0
        return position * rng.uniform(self.min_delay, self.max_delay)


class ScheduleSettings(BaseModel):
    """Recurring random-interval sending.

    Attributes:
        enabled: Whether the scheduler starts armed.
        min_interval: Lower bound in seconds between scheduled sends.
        max_interval: Upper bound; raised to ``min_interval`` if lower.
        mode: Which bots a scheduled send targets.
        subset_count: Number of bots used in subset mode.
    """

    enabled: bool = False
    min_interval: float = Field(default=SCHEDULE_MIN_INTERVAL_DEFAULT, ge=0)
    max_interval: float = Field(default=SCHEDULE_MAX_INTERVAL_DEFAULT, ge=0)
    mode: ScheduleMode = ScheduleMode.RANDOM
    subset_count: int = Field(default=SUBSET_COUNT_DEFAULT, ge=1)

    @model_validator(mode="after")
    def clamp_bounds(self) -> ScheduleSettings:
        if self.max_interval < self.min_interval:
            self.max_interval = self.min_interval
        return self


class RunnerSettings(BaseModel):
    """Everything the headless runner needs to start."""

    bots_file: str | None = None
    messages_file: str | None = None
    channel: str = ""
    schedule: ScheduleSettings = Field(default_factory=ScheduleSettings)
    delay: DelayPolicy = Field(default_factory=DelayPolicy)
    watch: bool = False
    probe_only: bool = False
    send_text: str | None = None

    @field_validator("channel", mode="before")
    @classmethod
    def validate_channel(cls, v: Any) -> str:
        """Strip whitespace and a leading '#', lower-case the channel name."""
        if v is None:
            return ""
        if not isinstance(v, str):
            raise ValueError("channel must be a string")
        return normalize_channel(v)
