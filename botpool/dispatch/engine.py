"""Multi-bot dispatch engine.

Turns a ``DispatchIntent`` into concurrent single-use IRC sends. Selection,
log entries and scheduling of the sends happen synchronously in ``dispatch``;
the network work runs in detached tasks whose only output is a
``SendOutcome`` pushed onto the result queue. The driver later hands each
outcome to ``apply``, so registry and log are only written from one place.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from secrets import SystemRandom

from ..bot.models import BotIdentity
from ..bot.registry import BotRegistry
from ..config.model import DelayPolicy
from ..errors import log_error
from ..irc.session import IRCSession, SendResult
from ..logs.logger import logger
from ..utils.tasks import BackgroundTasks
from .entries import format_error_entry, format_sent_entry
from .intents import AllBots, DispatchIntent, RandomBot, SingleBot, SubsetBots

Recorder = Callable[[int, str], None]


@dataclass(frozen=True, slots=True)
class PlannedSend:
    index: int
    message: str
    delay: float


@dataclass(frozen=True, slots=True)
class SendOutcome:
    index: int
    generation: int
    bot_name: str
    result: SendResult


class DispatchEngine:
    def __init__(
        self,
        registry: BotRegistry,
        session: IRCSession,
        results: asyncio.Queue,
        record: Recorder,
        *,
        delay_policy: DelayPolicy | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.registry = registry
        self.session = session
        self.results = results
        self.delay_policy = delay_policy or DelayPolicy()
        self.rng = rng or SystemRandom()
        self._record = record
        self._tasks = BackgroundTasks("send")

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def dispatch(self, intent: DispatchIntent) -> list[PlannedSend]:
        """Select targets, log the attempts and launch the sends.

        Returns the launched sends in selection order; an empty list means
        nothing happened (no eligible bot, no channel or no message).
        """
        uses_pool = isinstance(intent.target, SubsetBots) and bool(intent.pool)
        if not intent.channel or not (intent.message or uses_pool):
            logger.log_event(
                "dispatch",
                "skipped_empty",
                level=logging.DEBUG,
                has_channel=bool(intent.channel),
            )
            return []
        eligible = self.registry.eligible_indices()
        if not eligible:
            logger.log_event("dispatch", "no_eligible_bots", level=logging.DEBUG)
            return []

        targets = self._select(intent, eligible)
        if not targets:
            logger.log_event(
                "dispatch",
                "target_ineligible",
                level=logging.DEBUG,
                target=repr(intent.target),
            )
            return []

        generation = self.registry.generation
        planned: list[PlannedSend] = []
        for position, (index, message) in enumerate(targets):
            entry = self.registry.get(index)
            if entry is None:  # pragma: no cover - eligible indices are in range
                continue
            # Logged before the network call: the log records attempts.
            self._record(index, format_sent_entry(entry.name, message, intent.randomized))
            delay = self.delay_policy.stagger(position, self.rng)
            planned.append(PlannedSend(index=index, message=message, delay=delay))
            self._tasks.spawn(
                self._run_send(
                    index, generation, entry.identity, intent.channel, message, delay
                ),
                label=entry.name,
            )
        logger.log_event(
            "dispatch",
            "launched",
            channel=intent.channel,
            targets=len(planned),
            simultaneous=self.delay_policy.simultaneous,
            origin=intent.origin.value,
        )
        return planned

    def _select(
        self, intent: DispatchIntent, eligible: list[int]
    ) -> list[tuple[int, str]]:
        target = intent.target
        if isinstance(target, SingleBot):
            return [(target.index, intent.message)] if target.index in eligible else []
        if isinstance(target, RandomBot):
            return [(self.rng.choice(eligible), intent.message)]
        if isinstance(target, AllBots):
            return [(index, intent.message) for index in eligible]
        if isinstance(target, SubsetBots):
            if target.count <= 0:
                return []
            shuffled = list(eligible)
            self.rng.shuffle(shuffled)
            chosen = shuffled[: min(target.count, len(shuffled))]
            messages = self._assign_messages(intent, target, len(chosen))
            return list(zip(chosen, messages, strict=True))
        raise TypeError(f"unknown dispatch target: {target!r}")

    def _assign_messages(
        self, intent: DispatchIntent, target: SubsetBots, count: int
    ) -> list[str]:
        pool = list(intent.pool)
        if target.distinct_messages and len(pool) > 1:
            self.rng.shuffle(pool)
            return [pool[i % len(pool)] for i in range(count)]
        message = self.rng.choice(pool) if pool else intent.message
        return [message] * count

    async def _run_send(
        self,
        index: int,
        generation: int,
        identity: BotIdentity,
        channel: str,
        message: str,
        delay: float,
    ) -> None:
        if delay > 0:
            logger.log_event(
                "dispatch",
                "stagger_wait",
                level=logging.DEBUG,
                user=identity.name,
                delay=round(delay, 2),
            )
            await asyncio.sleep(delay)
        try:
            result = await self.session.send(
                identity.name, identity.token, channel, message
            )
        except Exception as e:  # noqa: BLE001
            log_error("Unexpected send failure", e, {"user": identity.name})
            result = SendResult.failure(e)
        self.results.put_nowait(
            SendOutcome(
                index=index, generation=generation, bot_name=identity.name, result=result
            )
        )

    def apply(self, outcome: SendOutcome) -> bool:
        """Reconcile one outcome on the driver; False if it was discarded."""
        if outcome.generation != self.registry.generation:
            logger.log_event(
                "dispatch",
                "stale_result",
                level=logging.DEBUG,
                user=outcome.bot_name,
            )
            return False
        if not outcome.result.ok:
            self._record(
                outcome.index, format_error_entry(outcome.bot_name, outcome.result.error)
            )
        return True

    async def wait_idle(self, timeout: float | None = None) -> bool:
        return await self._tasks.wait(timeout)
