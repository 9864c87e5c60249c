"""
Tests for the analytics chat orchestrator.

Tests cover:
- End-to-end template path with a real store and a scripted model
- General chat on greetings, bad classifier JSON and unknown templates
- Friendly fallback for store and formatter failures
- Input errors raised before the pipeline runs
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from commentlens.core.exceptions import AuthenticationRequired, EmptyMessage
from commentlens.services.analytics.orchestrator import (
    FALLBACK_RESPONSE,
    AnalyticsChatService,
)
from commentlens.services.analytics.prompts import GENERAL_CHAT_PROMPT, INTENT_CLASSIFIER_PROMPT

FORMATTER_MARKER = "## Query Results"


def scripted_model(classification: str, formatted: str = "formatted answer", chat: str = "Hey there!"):
    """A model double that answers by prompt type and records formatter prompts."""
    formatter_prompts = []

    async def reply(system_prompt: str, user_content: str) -> str:
        if system_prompt == INTENT_CLASSIFIER_PROMPT:
            return classification
        if system_prompt == GENERAL_CHAT_PROMPT:
            return chat
        if FORMATTER_MARKER in system_prompt:
            formatter_prompts.append(system_prompt)
            return formatted
        raise AssertionError(f"unexpected prompt: {system_prompt[:60]}")

    return reply, formatter_prompts


class TestTemplatePath:

    async def test_top_commenters_scenario(self, store, user_id, add_comments, make_generator):
        rows = [{"author": "alice"}] * 3 + [{"author": "bob"}] * 2
        rows += [{"author": f"viewer{i:02d}"} for i in range(1, 11)]
        await add_comments(user_id, *rows)

        reply, formatter_prompts = scripted_model(
            '{"templateId": "top_commenters", "params": {}}',
            formatted="Your most active commenter is alice with 3 comments!",
        )
        service = AnalyticsChatService(make_generator(reply), store)

        answer = await service.answer(user_id, "who are my top commenters?")

        assert answer.template_id == "top_commenters"
        assert "alice" in answer.response
        assert len(formatter_prompts) == 1
        prompt = formatter_prompts[0]
        assert 'The creator asked: "who are my top commenters?"' in prompt
        assert "Template used: top_commenters" in prompt
        assert '"author": "alice"' in prompt
        # default limit of 10 drops the last two alphabetical single-comment authors
        assert "viewer08" in prompt
        assert "viewer09" not in prompt and "viewer10" not in prompt

    async def test_params_are_sanitised_before_execution(self, make_generator):
        store = MagicMock()
        store.fetch_all = AsyncMock(return_value=[])
        reply, _ = scripted_model('{"templateId": "recent_comments", "params": {"limit": 99999}}')
        service = AnalyticsChatService(make_generator(reply), store)

        answer = await service.answer(1, "latest comments")

        assert answer.template_id == "recent_comments"
        stmt = store.fetch_all.await_args.args[0]
        assert stmt._limit_clause.value == 500


class TestGeneralChatPath:

    async def test_greeting(self, store, make_generator):
        reply, formatter_prompts = scripted_model(
            '{"templateId": "general_chat", "params": {}}', chat="Hi! Ask me about your comments.",
        )
        answer = await AnalyticsChatService(make_generator(reply), store).answer(1, "hello")

        assert answer.template_id == "general_chat"
        assert answer.response == "Hi! Ask me about your comments."
        assert formatter_prompts == []

    @pytest.mark.parametrize("classification", [
        '{"templateId": "top_comm',
        "Sure! Here is the JSON you asked for",
        "",
    ])
    async def test_invalid_classifier_output_falls_back_to_general_chat(
        self, classification, store, make_generator,
    ):
        reply, _ = scripted_model(classification, chat="Hello! I can help with your comments.")
        answer = await AnalyticsChatService(make_generator(reply), store).answer(1, "hey")

        assert answer.template_id == "general_chat"
        assert answer.response == "Hello! I can help with your comments."

    async def test_unknown_template_routes_to_general_chat(self, make_generator):
        store = MagicMock()
        store.fetch_all = AsyncMock()
        reply, _ = scripted_model('{"templateId": "delete_everything", "params": {}}', chat="Hi!")

        answer = await AnalyticsChatService(make_generator(reply), store).answer(1, "do it")

        assert answer.template_id == "general_chat"
        store.fetch_all.assert_not_awaited()


class TestFailureHandling:

    async def test_store_failure_becomes_friendly_fallback(self, make_generator):
        store = MagicMock()
        store.fetch_all = AsyncMock(side_effect=RuntimeError("connection reset"))
        reply, _ = scripted_model('{"templateId": "top_commenters", "params": {}}')

        answer = await AnalyticsChatService(make_generator(reply), store).answer(1, "top commenters")

        assert answer.response == FALLBACK_RESPONSE
        assert answer.template_id is None
        assert "connection reset" not in answer.response

    async def test_formatter_failure_becomes_friendly_fallback(self, store, make_generator):
        async def reply(system_prompt, user_content):
            if system_prompt == INTENT_CLASSIFIER_PROMPT:
                return '{"templateId": "sentiment_breakdown"}'
            raise RuntimeError("quota exceeded")

        answer = await AnalyticsChatService(make_generator(reply), store).answer(1, "sentiment?")
        assert answer.response == FALLBACK_RESPONSE

    async def test_general_chat_failure_becomes_friendly_fallback(self, store, make_generator):
        async def reply(system_prompt, user_content):
            raise RuntimeError("provider down")

        answer = await AnalyticsChatService(make_generator(reply), store).answer(1, "hi")
        assert answer.response == FALLBACK_RESPONSE


class TestInputErrors:

    async def test_missing_user(self, store, make_generator):
        generator = make_generator("unused")
        with pytest.raises(AuthenticationRequired):
            await AnalyticsChatService(generator, store).answer(None, "hello")
        generator.generate.assert_not_awaited()

    @pytest.mark.parametrize("message", ["", "   ", "\n\t", None])
    async def test_blank_message(self, message, store, make_generator):
        generator = make_generator("unused")
        with pytest.raises(EmptyMessage):
            await AnalyticsChatService(generator, store).answer(1, message)
        generator.generate.assert_not_awaited()
