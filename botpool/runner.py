"""Headless driver for the bot pool.

Loads the credential and message files, probes every bot and then either
performs a one-shot send or runs the random-interval schedule until a
shutdown signal arrives.
"""

from __future__ import annotations

import asyncio
import logging
import os

from .config.loader import read_text_file
from .config.model import RunnerSettings
from .config.watcher import FileWatcher
from .constants import (
    IRC_PROBE_TIMEOUT_SECONDS,
    RUNNER_DRAIN_TIMEOUT_SECONDS,
    SCHEDULER_TICK_SECONDS,
)
from .controller import BotPoolController, EventHooks
from .dispatch.engine import PlannedSend
from .dispatch.intents import AllBots
from .irc.session import IRCSession, SendResult
from .logs.logger import logger
from .signal_handler import SignalHandler
from .utils.helpers import format_duration


class BotPoolRunner:
    """Wires settings, files and signals around one ``BotPoolController``."""

    def __init__(
        self,
        settings: RunnerSettings,
        session: IRCSession | None = None,
        signals: SignalHandler | None = None,
    ) -> None:
        self.settings = settings
        self.signals = signals or SignalHandler()
        self.failures = 0
        self._last_status: str | None = None
        self.controller = BotPoolController(
            session,
            hooks=EventHooks(
                on_log_appended=self._on_log_appended,
                on_message_result=self._on_message_result,
                on_schedule_status=self._on_schedule_status,
            ),
            delay_policy=settings.delay,
            schedule=settings.schedule,
        )
        self.controller.set_channel(settings.channel)
        self.watcher: FileWatcher | None = None

    # ------------------------------ hooks ------------------------------ #
    @staticmethod
    def _on_log_appended(entry: str) -> None:
        logger.log_event("chat", "entry", human=entry)

    def _on_message_result(self, index: int, result: SendResult) -> None:
        if not result.ok:
            self.failures += 1

    def _on_schedule_status(self, seconds: float | None) -> None:
        status = format_duration(seconds)
        if status != self._last_status:
            self._last_status = status
            logger.log_event(
                "scheduler", "status", level=logging.DEBUG, next_in=status
            )

    # ----------------------------- loading ----------------------------- #
    def load_files(self) -> None:
        if self.settings.bots_file:
            self.controller.load_credentials(read_text_file(self.settings.bots_file))
        if self.settings.messages_file:
            self.controller.load_messages(read_text_file(self.settings.messages_file))

    def _on_file_changed(self, path: str) -> None:
        if self.settings.bots_file and path == os.path.abspath(self.settings.bots_file):
            self.controller.load_credentials(read_text_file(path))
            self.controller.probe_all_bots()
        elif self.settings.messages_file and path == os.path.abspath(
            self.settings.messages_file
        ):
            self.controller.load_messages(read_text_file(path))

    def _start_watcher(self) -> None:
        watcher = FileWatcher(asyncio.get_running_loop(), self._on_file_changed)
        for path in (self.settings.bots_file, self.settings.messages_file):
            if path:
                watcher.watch(path)
        watcher.start()
        self.watcher = watcher

    # ------------------------------- run ------------------------------- #
    async def probe(self) -> int:
        self.controller.probe_all_bots()
        await self.controller.drain(timeout=IRC_PROBE_TIMEOUT_SECONDS + 5)
        available = len(self.controller.registry.eligible_indices())
        logger.log_event(
            "runner",
            "probe_summary",
            available=available,
            total=len(self.controller.registry),
        )
        return available

    async def run(self) -> int:
        """Run according to settings; returns a process exit code."""
        self.load_files()
        if not len(self.controller.registry):
            logger.log_event("runner", "no_bots", level=logging.ERROR)
            return 1
        available = await self.probe()
        if self.settings.probe_only:
            return 0 if available else 1
        if not available:
            logger.log_event("runner", "no_available_bots", level=logging.ERROR)
            return 1
        if self.settings.send_text is not None:
            return await self.send_once(self.settings.send_text)
        if not self.controller.channel:
            logger.log_event("runner", "no_channel", level=logging.WARNING)
        return await self.run_schedule()

    async def send_once(self, text: str) -> int:
        planned = self.controller.send(AllBots(), text)
        if not planned:
            return 1
        await self.controller.drain(timeout=self._drain_timeout(planned))
        return 1 if self.failures else 0

    @staticmethod
    def _drain_timeout(planned: list[PlannedSend]) -> float:
        longest = max((p.delay for p in planned), default=0.0)
        return longest + RUNNER_DRAIN_TIMEOUT_SECONDS

    async def run_schedule(self) -> int:
        if self.settings.watch:
            self._start_watcher()
        self.controller.set_schedule(
            True, self.settings.schedule.min_interval, self.settings.schedule.max_interval
        )
        logger.log_event(
            "runner",
            "schedule_started",
            channel=self.controller.channel,
            mode=self.controller.schedule.mode.value,
        )
        try:
            while not self.signals.shutdown_initiated:
                await self.controller.wait_for_result(timeout=SCHEDULER_TICK_SECONDS)
                self.controller.tick()
        finally:
            self.controller.set_schedule(False)
            if self.watcher:
                self.watcher.stop()
            await self.controller.drain(timeout=RUNNER_DRAIN_TIMEOUT_SECONDS)
            logger.log_event("runner", "stopped", failures=self.failures)
        return 0


async def run_botpool(settings: RunnerSettings) -> int:
    runner = BotPoolRunner(settings)
    runner.signals.setup_signal_handlers()
    return await runner.run()
