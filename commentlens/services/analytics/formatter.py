"""
CommentLens Response Formatter

Second model call of the analytics pipeline: turns raw template results into
a conversational answer. Also serves the general-chat path.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from commentlens.llm.base import TextGenerator, generate_with_timeout
from commentlens.services.analytics.prompts import GENERAL_CHAT_PROMPT, RESPONSE_FORMATTER_PROMPT

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n... (results truncated)"


def serialize_results(results: Any, max_chars: int = 60000) -> str:
    payload = json.dumps(results, indent=2, default=str, ensure_ascii=False)
    if len(payload) > max_chars:
        logger.info(f"Query results truncated from {len(payload)} to {max_chars} chars")
        payload = payload[:max_chars] + TRUNCATION_MARKER
    return payload


class ResponseFormatter:
    """Both methods let ``LLMError`` propagate; the orchestrator owns the fallback."""

    def __init__(self, generator: TextGenerator, timeout: float = 30.0, max_result_chars: int = 60000):
        self.generator = generator
        self.timeout = timeout
        self.max_result_chars = max_result_chars

    def build_prompt(self, question: str, template_id: str, results: Any) -> str:
        return RESPONSE_FORMATTER_PROMPT.format(
            user_question=question,
            template_id=template_id,
            query_results=serialize_results(results, self.max_result_chars),
        )

    async def format(self, question: str, template_id: str, results: Any) -> str:
        prompt = self.build_prompt(question, template_id, results)
        text = await generate_with_timeout(
            self.generator, prompt, question, timeout=self.timeout, purpose="format",
        )
        return text.strip()

    async def general_chat(self, question: str) -> str:
        text = await generate_with_timeout(
            self.generator, GENERAL_CHAT_PROMPT, question, timeout=self.timeout, purpose="general_chat",
        )
        return text.strip()
