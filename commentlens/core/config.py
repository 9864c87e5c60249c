"""
CommentLens Core Settings.

Comment analytics chat + empathic rewriting service. All settings can be
overridden through environment variables prefixed with ``COMMENTLENS_`` or a
local ``.env`` file.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8",
        env_prefix="COMMENTLENS_", case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "CommentLens"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    secret_key: str = "change-me-in-production"
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    # ── PostgreSQL ───────────────────────────────────────────────────────
    db_host: str = "postgres"
    db_port: int = 5432
    db_user: str = "commentlens"
    db_password: str = "commentlens_secret"
    db_name: str = "commentlens"
    db_echo: bool = False
    database_url_override: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # ── Redis / Celery ───────────────────────────────────────────────────
    redis_url: str = "redis://redis:6379/0"
    celery_broker_url: str = "redis://redis:6379/1"
    celery_result_backend: str = "redis://redis:6379/2"

    # ── LLM Providers ────────────────────────────────────────────────────
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    google_api_key: Optional[str] = None

    anthropic_model: str = "claude-3-5-haiku-20241022"
    openai_model: str = "gpt-4o-mini"
    gemini_model: str = "gemini-2.5-flash"

    # Analytics chat: intent classification, formatting, general chat
    chat_provider: str = "gemini"
    # Comment pass 1 (sentiment classification)
    classifier_provider: str = "anthropic"
    # Comment pass 2 (empathic rewrite), tried in order
    rewrite_providers: List[str] = ["anthropic", "openai"]
    # Suggested replies the creator can post back
    reply_provider: str = "gemini"

    llm_timeout_seconds: float = 30.0
    llm_max_tokens: int = 1024
    classifier_max_tokens: int = 10
    llm_temperature: float = 0.3

    # ── Comment Transformation ───────────────────────────────────────────
    transform_batch_size: int = 5
    context_description_chars: int = 300
    transform_pending_limit: int = 500

    # ── Analytics Chat ───────────────────────────────────────────────────
    max_message_length: int = 2000
    formatter_max_result_chars: int = 60000


@lru_cache()
def get_settings() -> Settings:
    return Settings()
