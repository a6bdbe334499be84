"""Random-interval recurring trigger driven by external ticks.

States: Disabled (initial) and Armed. ``next_fire_at`` is set exactly when
the scheduler is armed. The interval is re-rolled every cycle, so two
consecutive sends are never a fixed distance apart.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from secrets import SystemRandom

from ..constants import (
    SCHEDULE_MAX_INTERVAL_DEFAULT,
    SCHEDULE_MIN_INTERVAL_DEFAULT,
    SCHEDULE_MIN_INTERVAL_FLOOR,
)
from ..errors import log_error
from ..logs.logger import logger


@dataclass(slots=True)
class ScheduleState:
    enabled: bool = False
    min_interval: float = SCHEDULE_MIN_INTERVAL_DEFAULT
    max_interval: float = SCHEDULE_MAX_INTERVAL_DEFAULT
    next_fire_at: float | None = None
    last_fire_at: float | None = None


class RandomIntervalScheduler:
    """Fires ``fire`` once per cycle while armed.

    ``tick`` is expected roughly every second from the driver. Timestamps are
    monotonic seconds unless a custom ``clock`` is supplied.
    """

    def __init__(
        self,
        fire: Callable[[], object],
        *,
        min_interval: float = SCHEDULE_MIN_INTERVAL_DEFAULT,
        max_interval: float = SCHEDULE_MAX_INTERVAL_DEFAULT,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._fire = fire
        self._rng = rng or SystemRandom()
        self._clock = clock
        self.state = ScheduleState(min_interval=min_interval, max_interval=max_interval)

    @property
    def armed(self) -> bool:
        return self.state.enabled

    def _now(self) -> float:
        return self._clock() if self._clock else time.monotonic()

    def _roll_interval(self) -> float:
        low = max(self.state.min_interval, SCHEDULE_MIN_INTERVAL_FLOOR)
        high = max(self.state.max_interval, low)
        return self._rng.uniform(low, high)

    def _schedule_next(self, now: float) -> None:
        interval = self._roll_interval()
        self.state.next_fire_at = now + interval
        logger.log_event(
            "scheduler",
            "next_scheduled",
            level=logging.DEBUG,
            seconds=round(interval, 1),
        )

    def set_bounds(self, min_interval: float, max_interval: float) -> None:
        """Update the interval bounds; the pending fire time is kept."""
        self.state.min_interval = max(0.0, min_interval)
        self.state.max_interval = max(self.state.min_interval, max_interval)

    def enable(self, now: float | None = None) -> None:
        if self.state.enabled:
            return
        self.state.enabled = True
        self._schedule_next(self._now() if now is None else now)
        logger.log_event(
            "scheduler",
            "armed",
            min_interval=self.state.min_interval,
            max_interval=self.state.max_interval,
        )

    def reschedule(self, now: float | None = None) -> None:
        """Re-roll the pending fire time from ``now`` with the current bounds."""
        if not self.state.enabled:
            return
        self._schedule_next(self._now() if now is None else now)

    def disable(self) -> None:
        if not self.state.enabled:
            return
        self.state.enabled = False
        self.state.next_fire_at = None
        logger.log_event("scheduler", "disarmed")

    def tick(self, now: float | None = None) -> bool:
        """Run one cycle if armed and due; True when a cycle ran."""
        now = self._now() if now is None else now
        next_fire_at = self.state.next_fire_at
        if not self.state.enabled or next_fire_at is None or now < next_fire_at:
            return False
        self._run_cycle(now)
        return True

    def fire_now(self, now: float | None = None) -> None:
        """Run one cycle immediately without changing the armed state."""
        self.state.next_fire_at = None
        self._run_cycle(self._now() if now is None else now)

    def seconds_until_next(self, now: float | None = None) -> float | None:
        if self.state.next_fire_at is None:
            return None
        now = self._now() if now is None else now
        return max(0.0, self.state.next_fire_at - now)

    def _run_cycle(self, now: float) -> None:
        self.state.next_fire_at = None
        try:
            self._fire()
        except Exception as e:  # noqa: BLE001
            log_error("Scheduled send failed", e)
        self.state.last_fire_at = now
        if self.state.enabled:
            self._schedule_next(now)
