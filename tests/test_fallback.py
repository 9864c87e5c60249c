"""
Tests for the provider fallback chain and the rewrite prompt builder.
"""

import asyncio

from commentlens.llm.fallback import FallbackChain, FallbackPolicy
from commentlens.services.comments.prompts import EMPATHIC_SYSTEM_PROMPT
from commentlens.services.comments.rewriter import EmpathicRewriter, build_system_prompt


class TestFallbackChain:

    async def test_primary_answer_wins(self, make_generator):
        primary = make_generator("  softened  ", name="anthropic")
        secondary = make_generator("other", name="openai")

        assert await FallbackChain([primary, secondary]).run("sys", "text") == "softened"
        secondary.generate.assert_not_awaited()

    async def test_error_moves_to_next_provider(self, make_generator):
        primary = make_generator(RuntimeError("overloaded"), name="anthropic")
        secondary = make_generator("from openai", name="openai")

        assert await FallbackChain([primary, secondary]).run("sys", "text") == "from openai"
        primary.generate.assert_awaited_once_with("sys", "text")

    async def test_empty_answer_moves_to_next_provider(self, make_generator):
        primary = make_generator("   ", name="anthropic")
        secondary = make_generator("from openai", name="openai")
        assert await FallbackChain([primary, secondary]).run("sys", "text") == "from openai"

    async def test_timeout_moves_to_next_provider(self, make_generator):
        async def slow(system_prompt, user_content):
            await asyncio.sleep(5)
            return "late"

        chain = FallbackChain(
            [make_generator(slow, name="slow"), make_generator("fast", name="fast")],
            FallbackPolicy(timeout=0.01),
        )
        assert await chain.run("sys", "text") == "fast"

    async def test_policy_can_reject_answers(self, make_generator):
        policy = FallbackPolicy(accept=lambda text: "?" not in text)
        chain = FallbackChain(
            [make_generator("why would you?", name="a"), make_generator("fine.", name="b")], policy,
        )
        assert await chain.run("sys", "text") == "fine."

    async def test_exhausted_chain_returns_none(self, make_generator):
        chain = FallbackChain([
            make_generator(RuntimeError("a down"), name="a"),
            make_generator("", name="b"),
        ])
        assert await chain.run("sys", "text") is None

    def test_provider_names(self, make_generator):
        chain = FallbackChain([make_generator(name="anthropic"), make_generator(name="openai")])
        assert chain.provider_names == ["anthropic", "openai"]


class TestEmpathicRewriter:

    async def test_no_providers_keeps_original(self):
        assert await EmpathicRewriter(FallbackChain([])).rewrite("rude text") == "rude text"

    async def test_all_providers_failing_keeps_original(self, make_generator):
        rewriter = EmpathicRewriter(FallbackChain([make_generator(RuntimeError("x"))]))
        assert await rewriter.rewrite("rude text") == "rude text"


class TestBuildSystemPrompt:

    def test_without_context_is_base_prompt(self):
        assert build_system_prompt() == EMPATHIC_SYSTEM_PROMPT
        assert build_system_prompt("", "") == EMPATHIC_SYSTEM_PROMPT

    def test_title_only(self):
        prompt = build_system_prompt("Why X is Better")
        assert prompt.startswith(EMPATHIC_SYSTEM_PROMPT + "\n\nVIDEO CONTEXT:\n")
        assert 'Title: "Why X is Better"' in prompt
        assert "Description:" not in prompt
        assert "Consider whether the comment tone matches" in prompt

    def test_description_truncated_to_300_chars(self):
        prompt = build_system_prompt(None, "d" * 450)
        assert f'Description: "{"d" * 300}..."' in prompt
        assert "d" * 301 not in prompt

    def test_short_description_not_marked_truncated(self):
        prompt = build_system_prompt(None, "d" * 300)
        assert f'Description: "{"d" * 300}"' in prompt
