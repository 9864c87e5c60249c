"""
CommentLens Analytics Chat Service

Answers a creator's free-text question about their comments:

    classify -> (general chat | sanitize -> lookup -> execute -> format)

Only a missing user and a blank message are reported to the caller. Every
other failure becomes ``FALLBACK_RESPONSE``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog

from commentlens.core.exceptions import AuthenticationRequired, EmptyMessage
from commentlens.core.metrics import CHAT_QUESTIONS
from commentlens.llm.base import TextGenerator
from commentlens.services.analytics.formatter import ResponseFormatter
from commentlens.services.analytics.intent import GENERAL_CHAT, IntentClassifier
from commentlens.services.analytics.params import validate_params
from commentlens.services.analytics.templates import get_template
from commentlens.services.comments.comment_store import CommentStore

logger = structlog.get_logger(__name__)

FALLBACK_RESPONSE = (
    "Sorry, I had trouble answering that one. "
    "Could you try rephrasing your question about your comments?"
)


@dataclass(frozen=True)
class ChatAnswer:
    response: str
    template_id: Optional[str] = None


class AnalyticsChatService:

    def __init__(
        self,
        generator: TextGenerator,
        store: CommentStore,
        timeout: float = 30.0,
        max_result_chars: int = 60000,
    ):
        self.store = store
        self.classifier = IntentClassifier(generator, timeout)
        self.formatter = ResponseFormatter(generator, timeout, max_result_chars)

    async def answer(self, user_id: Optional[int], message: Optional[str]) -> ChatAnswer:
        if user_id is None:
            raise AuthenticationRequired("Unauthorized")
        question = (message or "").strip()
        if not question:
            raise EmptyMessage("Message is required")

        log = logger.bind(user_id=user_id)
        template_id: Optional[str] = None
        try:
            classification = await self.classifier.classify(question)
            template_id = classification.template_id

            if classification.is_general_chat:
                return await self._general_chat(question)

            template = get_template(template_id)
            if template is None:
                log.warning("Unknown template requested, using general chat", template_id=template_id)
                return await self._general_chat(question)

            params = validate_params(classification.params)
            log.info("Running analytics template", template_id=template_id, params=params.to_dict())
            results = await template.execute(self.store, user_id, params)

            response = await self.formatter.format(question, template.id.value, results)
            CHAT_QUESTIONS.labels(template_id=template.id.value, outcome="ok").inc()
            return ChatAnswer(response=response, template_id=template.id.value)

        except Exception as e:
            log.error("Analytics chat failed", template_id=template_id, error=str(e), exc_info=True)
            known = template_id if template_id == GENERAL_CHAT or get_template(template_id) else "unknown"
            CHAT_QUESTIONS.labels(template_id=known, outcome="error").inc()
            return ChatAnswer(response=FALLBACK_RESPONSE)

    async def _general_chat(self, question: str) -> ChatAnswer:
        response = await self.formatter.general_chat(question)
        CHAT_QUESTIONS.labels(template_id=GENERAL_CHAT, outcome="ok").inc()
        return ChatAnswer(response=response, template_id=GENERAL_CHAT)
