"""
Service wiring for the API layer. Each provider is a FastAPI dependency so
tests can replace it through ``app.dependency_overrides``.
"""
from __future__ import annotations

from functools import lru_cache

from commentlens.core.config import get_settings
from commentlens.core.database import async_session_factory
from commentlens.llm.providers import build_generator
from commentlens.services.analytics.orchestrator import AnalyticsChatService
from commentlens.services.comments.comment_store import CommentStore
from commentlens.services.comments.reply_suggester import ReplySuggester


@lru_cache()
def get_comment_store() -> CommentStore:
    return CommentStore(async_session_factory)


@lru_cache()
def get_chat_service() -> AnalyticsChatService:
    settings = get_settings()
    return AnalyticsChatService(
        generator=build_generator(settings.chat_provider, settings),
        store=get_comment_store(),
        timeout=settings.llm_timeout_seconds,
        max_result_chars=settings.formatter_max_result_chars,
    )


@lru_cache()
def get_reply_suggester() -> ReplySuggester:
    settings = get_settings()
    return ReplySuggester(
        build_generator(settings.reply_provider, settings),
        timeout=settings.llm_timeout_seconds,
    )
