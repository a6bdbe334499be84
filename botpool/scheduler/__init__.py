"""Recurring random-interval send trigger."""

from .random_interval import RandomIntervalScheduler, ScheduleState

__all__ = ["RandomIntervalScheduler", "ScheduleState"]
