"""
Tests for the in-memory bot registry
"""

from botpool.bot.registry import BotRegistry


def _loaded(text: str = "t1|Alice\nt2|Bob\nt3|alicia") -> BotRegistry:
    registry = BotRegistry()
    registry.load_text(text)
    return registry


class TestBotRegistry:
    def test_load_resets_state(self):
        registry = _loaded()
        assert len(registry) == 3
        entry = registry.get(0)
        assert entry.state.available is False
        assert entry.state.enabled is True
        assert entry.state.history == []

    def test_reload_replaces_everything_and_bumps_generation(self):
        registry = _loaded()
        registry.set_available(0, True)
        registry.append_history(0, "[Alice] hi")
        generation = registry.generation
        registry.load_text("t9|Zed")
        assert registry.generation == generation + 1
        assert [e.name for e in registry] == ["Zed"]
        assert registry.get(0).state.history == []
        assert registry.get(0).state.available is False

    def test_reload_keeps_counter(self):
        registry = BotRegistry()
        registry.load_text("a\nb")
        registry.load_text("c")
        assert registry.get(0).name == "bot_3"

    def test_out_of_range_is_ignored(self):
        registry = _loaded()
        assert registry.get(10) is None
        assert registry.get(-1) is None
        assert registry.set_available(10, True) is False
        assert registry.set_enabled(10, False) is False
        assert registry.append_history(10, "x") is False
        assert registry.clear_history(10) is False

    def test_eligible_needs_available_and_enabled(self):
        registry = _loaded()
        registry.set_available(0, True)
        registry.set_available(1, True)
        registry.set_enabled(1, False)
        assert registry.eligible_indices() == [0]

    def test_clear_history(self):
        registry = _loaded()
        registry.append_history(0, "a")
        registry.append_history(1, "b")
        registry.clear_history(0)
        assert registry.get(0).state.history == []
        assert registry.get(1).state.history == ["b"]
        registry.clear_all_histories()
        assert registry.get(1).state.history == []

    def test_filtered_is_case_insensitive_and_keeps_indices(self):
        registry = _loaded()
        result = registry.filtered("ALI")
        assert [(i, e.name) for i, e in result] == [(0, "Alice"), (2, "alicia")]
        assert len(registry.filtered("")) == 3

    def test_find_by_name_first_match(self):
        registry = _loaded("t1|Dup\nt2|Dup")
        assert registry.find_by_name("Dup") == 0
        assert registry.find_by_name("nobody") is None
