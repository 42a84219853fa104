"""Tests for the sequential thinking engine."""

import pytest

from conftest import StubProvider
from prompt_enhancer.config import AppConfig, RetryConfig, ThinkingConfig
from prompt_enhancer.errors import AuthenticationError, TransportError
from prompt_enhancer.models.result import Thought
from prompt_enhancer.pipeline.sequential_thinker import SequentialThinker, format_thought

SYNTHESIS = "Write an iterative Python fibonacci function with input validation and three examples."


def _numbered(call):
    return f"Reasoning for {call.purpose}"


class TestSequentialThinker:
    @pytest.mark.asyncio
    async def test_three_passes_produce_ordered_thoughts(self, fast_config):
        provider = StubProvider("Identify intent.", "Add constraints.", SYNTHESIS)
        thinker = SequentialThinker(provider, fast_config)

        thoughts = await thinker.run("write code for fibonacci", 3)

        assert [t.index for t in thoughts] == [1, 2, 3]
        assert [t.is_final for t in thoughts] == [False, False, True]
        assert len({t.content for t in thoughts}) == 3
        assert thoughts[-1].content == SYNTHESIS
        assert provider.call_count == 3

    @pytest.mark.asyncio
    async def test_each_pass_sees_previous_thoughts(self, fast_config):
        provider = StubProvider(_numbered)
        thinker = SequentialThinker(provider, fast_config)

        await thinker.run("write code for fibonacci", 3)

        assert [c.purpose for c in provider.calls] == ["thought-1", "thought-2", "synthesis"]
        assert "Reasoning for thought-1" in provider.calls[1].user_prompt
        assert "Reasoning for thought-2" in provider.calls[2].user_prompt
        assert "Reasoning so far" not in provider.calls[0].user_prompt

    @pytest.mark.asyncio
    async def test_single_pass_is_the_synthesis(self, fast_config):
        provider = StubProvider(SYNTHESIS)
        thinker = SequentialThinker(provider, fast_config)

        thoughts = await thinker.run("write code for fibonacci", 1)

        assert len(thoughts) == 1
        assert thoughts[0].is_final
        assert provider.calls[0].purpose == "synthesis"

    @pytest.mark.asyncio
    async def test_default_count_from_config(self, fast_config):
        provider = StubProvider(_numbered)
        thinker = SequentialThinker(provider, fast_config)

        thoughts = await thinker.run("write code for fibonacci")

        assert len(thoughts) == fast_config.thinking.default_thoughts

    @pytest.mark.asyncio
    async def test_draft_is_included_in_every_pass(self, fast_config):
        provider = StubProvider(_numbered)
        thinker = SequentialThinker(provider, fast_config)

        await thinker.run("write code for fibonacci", 2, draft="DRAFT-TEXT")

        assert all("DRAFT-TEXT" in c.user_prompt for c in provider.calls)

    @pytest.mark.asyncio
    async def test_synthesis_output_is_cleaned(self, fast_config):
        provider = StubProvider("Enhanced prompt: " + SYNTHESIS)
        thinker = SequentialThinker(provider, fast_config)

        thoughts = await thinker.run("write code for fibonacci", 1)

        assert thoughts[0].content == SYNTHESIS


class TestThoughtCountClamping:
    def test_clamp_bounds(self, fast_config):
        thinker = SequentialThinker(StubProvider(), fast_config)
        assert thinker.clamp(None) == 3
        assert thinker.clamp(0) == 1
        assert thinker.clamp(-4) == 1
        assert thinker.clamp(5) == 5
        assert thinker.clamp(50) == 10

    def test_clamp_respects_configured_maximum(self):
        config = AppConfig(thinking=ThinkingConfig(default_thoughts=2, max_thoughts=4))
        thinker = SequentialThinker(StubProvider(), config)
        assert thinker.clamp(9) == 4

    @pytest.mark.asyncio
    async def test_oversized_count_runs_maximum_passes(self, fast_config):
        provider = StubProvider(_numbered)
        thinker = SequentialThinker(provider, fast_config)

        thoughts = await thinker.run("plan a migration", 50)

        assert len(thoughts) == 10
        assert provider.call_count == 10


class TestDegradedRuns:
    @pytest.mark.asyncio
    async def test_failed_pass_ends_run_with_last_thought_final(self, fast_config):
        provider = StubProvider("Identify intent.", TransportError("reset"))
        thinker = SequentialThinker(provider, fast_config)

        thoughts = await thinker.run("write code for fibonacci", 3)

        assert len(thoughts) == 1
        assert thoughts[0].is_final
        # one success, then the smaller per-pass budget
        assert provider.call_count == 1 + fast_config.retry.thought_attempts

    @pytest.mark.asyncio
    async def test_failing_first_pass_returns_no_thoughts(self, fast_config):
        provider = StubProvider(AuthenticationError("bad key"))
        thinker = SequentialThinker(provider, fast_config)

        thoughts = await thinker.run("write code for fibonacci", 3)

        assert thoughts == []
        assert provider.call_count == 1

    @pytest.mark.asyncio
    async def test_thought_attempts_budget_is_configurable(self):
        config = AppConfig(retry=RetryConfig(thought_attempts=1, backoff_base=0.0, backoff_max=0.0))
        provider = StubProvider(TransportError("reset"))
        thinker = SequentialThinker(provider, config)

        thoughts = await thinker.run("write code for fibonacci", 2)

        assert thoughts == []
        assert provider.call_count == 1


def test_format_thought_labels_synthesis():
    assert format_thought(Thought(index=2, content="x", is_final=True), 2) == "Synthesis 2/2\nx"
    assert format_thought(Thought(index=1, content="y"), 2) == "Thought 1/2\ny"
