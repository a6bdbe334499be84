"""
Tests for multi-bot dispatch
"""

import asyncio
import random

import pytest

from botpool.bot.registry import BotRegistry
from botpool.config.model import DelayPolicy
from botpool.dispatch.engine import DispatchEngine, SendOutcome
from botpool.dispatch.entries import extract_bot_name, format_error_entry, format_sent_entry
from botpool.dispatch.intents import (
    AllBots,
    DispatchIntent,
    Origin,
    RandomBot,
    SingleBot,
    SubsetBots,
)
from botpool.irc.session import SendResult
from tests.fixtures.irc_fixtures import FakeSession


class Recorder:
    def __init__(self):
        self.entries: list[tuple[int, str]] = []

    def __call__(self, index: int, entry: str) -> None:
        self.entries.append((index, entry))


class TimedSession(FakeSession):
    """Records the loop time at which each bot's send started."""

    def __init__(self, loop):
        super().__init__()
        self.loop = loop
        self.started: dict[str, float] = {}

    async def send(self, name, token, channel, message):
        self.started[name] = self.loop.time()
        return await super().send(name, token, channel, message)


def _make_engine(session=None, available=(0, 1, 2, 3), delay_policy=None, seed=7):
    registry = BotRegistry()
    registry.load_text("t0|Alice\nt1|Bob\nt2|Carol\nt3|Dave")
    for index in available:
        registry.set_available(index, True)
    recorder = Recorder()
    engine = DispatchEngine(
        registry,
        session or FakeSession(),
        asyncio.Queue(),
        recorder,
        delay_policy=delay_policy,
        rng=random.Random(seed),
    )
    return engine, registry, recorder


def _drain_queue(queue: asyncio.Queue) -> list[SendOutcome]:
    items = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


class TestEntries:
    def test_sent_entry_formats(self):
        assert format_sent_entry("Alice", "hi", False) == "[Alice] hi"
        assert format_sent_entry("Alice", "hi", True) == "[🎲 Alice] hi"

    def test_error_entry(self):
        assert format_error_entry("Bob", "boom") == "❌ Error [Bob]: boom"
        assert format_error_entry("Bob", None) == "❌ Error [Bob]: unknown error"

    def test_extract_name(self):
        assert extract_bot_name("[Alice] hi") == "Alice"
        assert extract_bot_name("[🎲 Alice] hi [x]") == "Alice"
        assert extract_bot_name("❌ Error [Bob]: boom") == "Bob"
        assert extract_bot_name("no brackets") is None
        assert extract_bot_name("[unterminated") is None


class TestIntent:
    def test_randomized_flags(self):
        assert not DispatchIntent(AllBots(), "hi", "chan").randomized
        assert not DispatchIntent(SingleBot(0), "hi", "chan").randomized
        assert DispatchIntent(RandomBot(), "hi", "chan").randomized
        assert DispatchIntent(SubsetBots(2), "hi", "chan").randomized
        assert DispatchIntent(AllBots(), "hi", "chan", origin=Origin.SCHEDULER).randomized


class TestDispatch:
    @pytest.mark.asyncio
    async def test_all_bots_only_eligible(self):
        session = FakeSession()
        engine, registry, recorder = _make_engine(session, available=(0, 2))
        planned = engine.dispatch(DispatchIntent(AllBots(), "hello", "chan"))
        assert [p.index for p in planned] == [0, 2]
        assert all(p.delay == 0 for p in planned)
        await engine.wait_idle(1)
        assert sorted(name for name, _, _ in session.sends) == ["Alice", "Carol"]
        assert recorder.entries == [(0, "[Alice] hello"), (2, "[Carol] hello")]

    @pytest.mark.asyncio
    async def test_excluded_bots_never_send_across_toggles(self):
        session = FakeSession()
        engine, registry, recorder = _make_engine(session)
        registry.set_enabled(1, False)
        engine.dispatch(DispatchIntent(AllBots(), "one", "chan"))
        registry.set_enabled(1, True)
        registry.set_available(2, False)
        engine.dispatch(DispatchIntent(AllBots(), "two", "chan"))
        registry.set_available(2, True)
        registry.set_enabled(0, False)
        registry.set_available(3, False)
        engine.dispatch(DispatchIntent(AllBots(), "three", "chan"))
        # Re-enabling after launch must not retroactively add sends.
        registry.set_enabled(0, True)
        await engine.wait_idle(1)

        sent = {
            message: sorted(name for name, _, m in session.sends if m == message)
            for message in ("one", "two", "three")
        }
        assert sent["one"] == ["Alice", "Carol", "Dave"]
        assert sent["two"] == ["Alice", "Bob", "Dave"]
        assert sent["three"] == ["Bob", "Carol"]
        assert len(session.sends) == len(recorder.entries) == 8

    @pytest.mark.asyncio
    async def test_entries_logged_before_sends_complete(self):
        engine, _, recorder = _make_engine()
        engine.dispatch(DispatchIntent(SingleBot(1), "first", "chan"))
        # No await yet: the send task has not run.
        assert recorder.entries == [(1, "[Bob] first")]
        assert engine.in_flight == 1
        await engine.wait_idle(1)
        assert engine.in_flight == 0

    @pytest.mark.asyncio
    async def test_single_ineligible_bot_is_noop(self):
        session = FakeSession()
        engine, _, recorder = _make_engine(session, available=(0,))
        assert engine.dispatch(DispatchIntent(SingleBot(1), "hi", "chan")) == []
        assert engine.dispatch(DispatchIntent(SingleBot(42), "hi", "chan")) == []
        assert recorder.entries == []
        assert session.sends == []

    @pytest.mark.asyncio
    async def test_no_eligible_bots_is_noop(self):
        engine, _, recorder = _make_engine(available=())
        assert engine.dispatch(DispatchIntent(AllBots(), "hi", "chan")) == []
        assert recorder.entries == []

    @pytest.mark.asyncio
    async def test_empty_channel_or_message_is_noop(self):
        engine, _, recorder = _make_engine()
        assert engine.dispatch(DispatchIntent(AllBots(), "hi", "")) == []
        assert engine.dispatch(DispatchIntent(AllBots(), "", "chan", pool=("x",))) == []
        assert recorder.entries == []

    @pytest.mark.asyncio
    async def test_random_bot_picks_one_eligible(self):
        engine, _, recorder = _make_engine(available=(1, 3))
        planned = engine.dispatch(DispatchIntent(RandomBot(), "hi", "chan"))
        assert len(planned) == 1
        assert planned[0].index in (1, 3)
        assert recorder.entries[0][1].startswith("[🎲 ")
        await engine.wait_idle(1)

    @pytest.mark.asyncio
    async def test_subset_larger_than_eligible_uses_all(self):
        engine, _, _ = _make_engine(available=(0, 1))
        planned = engine.dispatch(DispatchIntent(SubsetBots(10), "hi", "chan"))
        assert sorted(p.index for p in planned) == [0, 1]
        await engine.wait_idle(1)

    @pytest.mark.asyncio
    async def test_subset_distinct_indices_and_pool_messages(self):
        engine, _, _ = _make_engine()
        pool = ("a", "b", "c")
        planned = engine.dispatch(DispatchIntent(SubsetBots(3), "", "chan", pool=pool))
        assert len(planned) == 3
        assert len({p.index for p in planned}) == 3
        assert sorted(p.message for p in planned) == ["a", "b", "c"]
        await engine.wait_idle(1)

    @pytest.mark.asyncio
    async def test_subset_zero_is_noop(self):
        engine, _, recorder = _make_engine()
        assert engine.dispatch(DispatchIntent(SubsetBots(0), "hi", "chan")) == []
        assert recorder.entries == []

    @pytest.mark.asyncio
    async def test_stagger_delays_within_bounds(self):
        loop = asyncio.get_running_loop()
        session = TimedSession(loop)
        policy = DelayPolicy(simultaneous=False, min_delay=0.2, max_delay=0.3)
        engine, registry, _ = _make_engine(session, delay_policy=policy)
        start = loop.time()
        planned = engine.dispatch(DispatchIntent(AllBots(), "hi", "chan"))
        assert planned[0].delay == 0
        await engine.wait_idle(5)
        for k, send in enumerate(planned):
            elapsed = session.started[registry.get(send.index).name] - start
            assert 0.2 * k - 0.01 <= elapsed <= 0.3 * k + 0.15

    @pytest.mark.asyncio
    async def test_simultaneous_has_no_delay(self):
        engine, _, _ = _make_engine(delay_policy=DelayPolicy(simultaneous=True))
        planned = engine.dispatch(DispatchIntent(AllBots(), "hi", "chan"))
        assert {p.delay for p in planned} == {0.0}
        await engine.wait_idle(1)


class TestOutcomes:
    @pytest.mark.asyncio
    async def test_failure_records_error_entry(self):
        session = FakeSession(fail={"Bob"})
        engine, registry, recorder = _make_engine(session, available=(1,))
        engine.dispatch(DispatchIntent(SingleBot(1), "hi", "chan"))
        await engine.wait_idle(1)
        (outcome,) = _drain_queue(engine.results)
        assert outcome.result.ok is False
        assert engine.apply(outcome) is True
        assert recorder.entries[-1] == (1, "❌ Error [Bob]: could not join channel #chan")

    @pytest.mark.asyncio
    async def test_success_adds_nothing(self):
        engine, _, recorder = _make_engine(available=(0,))
        engine.dispatch(DispatchIntent(SingleBot(0), "hi", "chan"))
        await engine.wait_idle(1)
        (outcome,) = _drain_queue(engine.results)
        assert engine.apply(outcome) is True
        assert recorder.entries == [(0, "[Alice] hi")]

    @pytest.mark.asyncio
    async def test_stale_generation_is_discarded(self):
        session = FakeSession(fail={"Alice"})
        engine, registry, recorder = _make_engine(session, available=(0,))
        engine.dispatch(DispatchIntent(SingleBot(0), "hi", "chan"))
        await engine.wait_idle(1)
        registry.load_text("t9|Zed")
        (outcome,) = _drain_queue(engine.results)
        assert engine.apply(outcome) is False
        assert len(recorder.entries) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_failure(self):
        class ExplodingSession(FakeSession):
            async def send(self, name, token, channel, message):
                raise RuntimeError("kaboom")

        engine, _, _ = _make_engine(ExplodingSession(), available=(0,))
        engine.dispatch(DispatchIntent(SingleBot(0), "hi", "chan"))
        await engine.wait_idle(1)
        (outcome,) = _drain_queue(engine.results)
        assert outcome.result == SendResult(ok=False, error="kaboom", error_type="RuntimeError")
