"""Command and event surface of the bot pool.

``BotPoolController`` is the single writer: every registry and chat-log
mutation happens inside one of its methods, called from the driver (a UI
event loop or the headless runner). Probe and send tasks only push
``ProbeOutcome`` / ``SendOutcome`` values onto ``results``; the driver applies
them with ``process_pending_results`` or ``wait_for_result``.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from secrets import SystemRandom

from pydantic import ValidationError

from .bot.credentials import parse_message_pool
from .bot.models import BotEntry, BotIdentity
from .bot.registry import BotRegistry
from .config.model import DelayPolicy, ScheduleMode, ScheduleSettings
from .dispatch.engine import DispatchEngine, PlannedSend, SendOutcome
from .dispatch.entries import extract_bot_name
from .dispatch.intents import (
    AllBots,
    DispatchIntent,
    Origin,
    RandomBot,
    SubsetBots,
    Target,
)
from .errors import log_error
from .irc.protocol import normalize_channel
from .irc.session import IRCSession, SendResult
from .logs.logger import logger
from .scheduler.random_interval import RandomIntervalScheduler
from .utils.tasks import BackgroundTasks


@dataclass(slots=True)
class EventHooks:
    """Optional collaborator callbacks; a hook that raises is logged and ignored."""

    on_availability_changed: Callable[[int, bool], object] | None = None
    on_message_result: Callable[[int, SendResult], object] | None = None
    on_log_appended: Callable[[str], object] | None = None
    on_schedule_status: Callable[[float | None], object] | None = None


@dataclass(frozen=True, slots=True)
class ProbeOutcome:
    index: int
    generation: int
    bot_name: str
    available: bool


class BotPoolController:  # pylint: disable=too-many-instance-attributes,too-many-public-methods
    def __init__(
        self,
        session: IRCSession | None = None,
        *,
        hooks: EventHooks | None = None,
        delay_policy: DelayPolicy | None = None,
        schedule: ScheduleSettings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.session = session or IRCSession()
        self.hooks = hooks or EventHooks()
        self.rng = rng or SystemRandom()
        self.registry = BotRegistry()
        self.chat_log: list[str] = []
        self.messages: list[str] = []
        self.channel = ""
        self.results: asyncio.Queue[ProbeOutcome | SendOutcome] = asyncio.Queue()
        self.engine = DispatchEngine(
            self.registry,
            self.session,
            self.results,
            self._record,
            delay_policy=delay_policy,
            rng=self.rng,
        )
        self.schedule = schedule or ScheduleSettings()
        self.scheduler = RandomIntervalScheduler(
            self.send_random_message,
            min_interval=self.schedule.min_interval,
            max_interval=self.schedule.max_interval,
            rng=self.rng,
            clock=clock,
        )
        self._probes = BackgroundTasks("probe")

    # ----------------------------- loading ----------------------------- #
    def load_credentials(self, text: str) -> list[BotIdentity]:
        """Replace every bot; prior availability, flags and histories are dropped."""
        return self.registry.load_text(text)

    def load_messages(self, text: str) -> list[str]:
        self.messages = parse_message_pool(text)
        logger.log_event("messages", "loaded", count=len(self.messages))
        return self.messages

    def set_channel(self, channel: str) -> None:
        self.channel = normalize_channel(channel)

    # ------------------------------ bots ------------------------------- #
    def probe_all_bots(self) -> int:
        """Launch one connectivity probe per bot; returns how many started."""
        generation = self.registry.generation
        for index, entry in enumerate(self.registry):
            self._probes.spawn(
                self._run_probe(index, generation, entry.identity), label=entry.name
            )
        logger.log_event("registry", "probe_all", count=len(self.registry))
        return len(self.registry)

    async def _run_probe(self, index: int, generation: int, identity: BotIdentity) -> None:
        try:
            available = await self.session.probe(identity.name, identity.token)
        except Exception as e:  # noqa: BLE001
            log_error("Unexpected probe failure", e, {"user": identity.name})
            available = False
        self.results.put_nowait(
            ProbeOutcome(
                index=index,
                generation=generation,
                bot_name=identity.name,
                available=available,
            )
        )

    def set_bot_enabled(self, index: int, enabled: bool) -> bool:
        return self.registry.set_enabled(index, enabled)

    def filtered_bots(self, query: str) -> list[tuple[int, BotEntry]]:
        return self.registry.filtered(query)

    def origin_of(self, entry: str) -> int | None:
        """Index of the bot a log entry belongs to (first name match wins)."""
        name = extract_bot_name(entry)
        return self.registry.find_by_name(name) if name else None

    # ----------------------------- sending ----------------------------- #
    def send(
        self, target: Target, message: str, channel: str | None = None
    ) -> list[PlannedSend]:
        intent = DispatchIntent(
            target=target,
            message=message,
            channel=normalize_channel(channel) if channel is not None else self.channel,
            pool=tuple(self.messages),
        )
        return self.engine.dispatch(intent)

    def send_random_message(self) -> list[PlannedSend]:
        """One scheduled cycle: a random pool message via the configured mode."""
        if not self.messages or not self.channel:
            logger.log_event(
                "scheduler",
                "fire_skipped",
                level=logging.DEBUG,
                messages=len(self.messages),
                has_channel=bool(self.channel),
            )
            return []
        target: Target
        if self.schedule.mode is ScheduleMode.SUBSET:
            target = SubsetBots(self.schedule.subset_count)
        elif self.schedule.mode is ScheduleMode.ALL:
            target = AllBots()
        else:
            target = RandomBot()
        intent = DispatchIntent(
            target=target,
            message=self.rng.choice(self.messages),
            channel=self.channel,
            pool=tuple(self.messages),
            origin=Origin.SCHEDULER,
        )
        return self.engine.dispatch(intent)

    def set_delay_policy(
        self, simultaneous: bool, min_delay: float, max_delay: float
    ) -> bool:
        try:
            policy = DelayPolicy(
                simultaneous=simultaneous, min_delay=min_delay, max_delay=max_delay
            )
        except ValidationError as e:
            log_error("Rejected delay policy", e, level=logging.WARNING)
            return False
        self.engine.delay_policy = policy
        logger.log_event(
            "dispatch",
            "delay_policy",
            simultaneous=policy.simultaneous,
            min_delay=policy.min_delay,
            max_delay=policy.max_delay,
        )
        return True

    # ---------------------------- schedule ----------------------------- #
    def set_schedule(
        self,
        enabled: bool,
        min_interval: float | None = None,
        max_interval: float | None = None,
    ) -> bool:
        update: dict[str, object] = {"enabled": enabled}
        if min_interval is not None:
            update["min_interval"] = min_interval
        if max_interval is not None:
            update["max_interval"] = max_interval
        try:
            settings = ScheduleSettings.model_validate(
                {**self.schedule.model_dump(), **update}
            )
        except ValidationError as e:
            log_error("Rejected schedule settings", e, level=logging.WARNING)
            return False
        self.schedule = settings
        self.scheduler.set_bounds(settings.min_interval, settings.max_interval)
        if settings.enabled and self.scheduler.armed:
            self.scheduler.reschedule()
        elif settings.enabled:
            self.scheduler.enable()
        else:
            self.scheduler.disable()
        self._emit_schedule_status()
        return True

    def set_schedule_mode(self, mode: ScheduleMode | str, subset_count: int | None = None) -> bool:
        update: dict[str, object] = {"mode": mode}
        if subset_count is not None:
            update["subset_count"] = subset_count
        try:
            self.schedule = ScheduleSettings.model_validate(
                {**self.schedule.model_dump(), **update}
            )
        except ValidationError as e:
            log_error("Rejected schedule mode", e, level=logging.WARNING)
            return False
        return True

    def fire_now(self) -> None:
        self.scheduler.fire_now()
        self._emit_schedule_status()

    def tick(self, now: float | None = None) -> bool:
        fired = self.scheduler.tick(now)
        self._emit_schedule_status(now)
        return fired

    def _emit_schedule_status(self, now: float | None = None) -> None:
        self._emit("on_schedule_status", self.scheduler.seconds_until_next(now))

    # ----------------------------- history ----------------------------- #
    def clear_bot_history(self, index: int) -> bool:
        return self.registry.clear_history(index)

    def clear_global_log(self) -> None:
        self.chat_log.clear()

    def clear_all(self) -> None:
        self.chat_log.clear()
        self.registry.clear_all_histories()

    def _record(self, index: int, entry: str) -> None:
        self.registry.append_history(index, entry)
        self.chat_log.append(entry)
        self._emit("on_log_appended", entry)

    # ----------------------------- results ----------------------------- #
    def process_pending_results(self) -> int:
        """Apply every result already queued; returns how many were applied."""
        applied = 0
        while True:
            try:
                outcome = self.results.get_nowait()
            except asyncio.QueueEmpty:
                return applied
            applied += self._apply(outcome)

    async def wait_for_result(self, timeout: float | None) -> int:
        """Block up to ``timeout`` for one result, then apply everything queued."""
        try:
            outcome = await asyncio.wait_for(self.results.get(), timeout=timeout)
        except TimeoutError:
            return 0
        return self._apply(outcome) + self.process_pending_results()

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for in-flight probes and sends, then apply their results."""
        probes_done = await self._probes.wait(timeout)
        sends_done = await self.engine.wait_idle(timeout)
        self.process_pending_results()
        return probes_done and sends_done

    def _apply(self, outcome: ProbeOutcome | SendOutcome) -> int:
        if isinstance(outcome, ProbeOutcome):
            if outcome.generation != self.registry.generation:
                return 0
            self.registry.set_available(outcome.index, outcome.available)
            logger.log_event(
                "registry",
                "availability",
                level=logging.DEBUG,
                user=outcome.bot_name,
                available=outcome.available,
            )
            self._emit("on_availability_changed", outcome.index, outcome.available)
            return 1
        if not self.engine.apply(outcome):
            return 0
        self._emit("on_message_result", outcome.index, outcome.result)
        return 1

    def _emit(self, hook_name: str, *args: object) -> None:
        hook = getattr(self.hooks, hook_name)
        if hook is None:
            return
        try:
            hook(*args)
        except Exception as e:  # noqa: BLE001
            log_error("Event hook failed", e, {"hook": hook_name})
