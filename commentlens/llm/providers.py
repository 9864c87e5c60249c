"""
Provider implementations of the text-generation capability: Anthropic,
OpenAI and Gemini. All three use the official async SDK entry points.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

import anthropic
import google.generativeai as genai
import openai

from commentlens.core.config import Settings, get_settings
from commentlens.core.exceptions import LLMError, ProviderNotConfigured

logger = logging.getLogger(__name__)

PROVIDERS = ("anthropic", "openai", "gemini")


class AnthropicGenerator:
    """Claude via the Messages API."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024):
        self.model = model
        self.max_tokens = max_tokens
        self._client = anthropic.AsyncAnthropic(api_key=api_key)

    async def generate(self, system_prompt: str, user_content: str) -> str:
        message = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_content}],
        )
        parts = [block.text for block in message.content if getattr(block, "type", None) == "text"]
        if not parts:
            raise LLMError("Anthropic response contained no text block")
        return "".join(parts)


class OpenAIGenerator:
    """OpenAI Chat Completions."""

    name = "openai"

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024, temperature: float = 0.3):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = openai.AsyncOpenAI(api_key=api_key)

    async def generate(self, system_prompt: str, user_content: str) -> str:
        response = await self._client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
        )
        if not response.choices:
            raise LLMError("OpenAI response contained no choices")
        return response.choices[0].message.content or ""


class GeminiGenerator:
    """Google Gemini through google-generativeai."""

    name = "gemini"

    def __init__(self, api_key: str, model: str, max_tokens: int = 1024, temperature: float = 0.3):
        genai.configure(api_key=api_key)
        self.model = model
        self.generation_config = genai.GenerationConfig(
            max_output_tokens=max_tokens, temperature=temperature,
        )

    async def generate(self, system_prompt: str, user_content: str) -> str:
        model = genai.GenerativeModel(self.model, system_instruction=system_prompt)
        response = await model.generate_content_async(
            user_content, generation_config=self.generation_config,
        )
        try:
            return response.text
        except ValueError as exc:
            # .text raises when the candidate was blocked or has no parts
            raise LLMError(f"Gemini returned no text: {exc}") from exc


def build_generator(
    provider: str,
    settings: Optional[Settings] = None,
    max_tokens: Optional[int] = None,
):
    """Instantiate one provider by name using the configured key and model."""
    settings = settings or get_settings()
    max_tokens = max_tokens or settings.llm_max_tokens
    provider = provider.strip().lower()

    if provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ProviderNotConfigured("COMMENTLENS_ANTHROPIC_API_KEY is not set")
        return AnthropicGenerator(settings.anthropic_api_key, settings.anthropic_model, max_tokens)
    if provider == "openai":
        if not settings.openai_api_key:
            raise ProviderNotConfigured("COMMENTLENS_OPENAI_API_KEY is not set")
        return OpenAIGenerator(
            settings.openai_api_key, settings.openai_model, max_tokens, settings.llm_temperature,
        )
    if provider == "gemini":
        if not settings.google_api_key:
            raise ProviderNotConfigured("COMMENTLENS_GOOGLE_API_KEY is not set")
        return GeminiGenerator(
            settings.google_api_key, settings.gemini_model, max_tokens, settings.llm_temperature,
        )
    raise ProviderNotConfigured(f"Unknown provider '{provider}' (expected one of {PROVIDERS})")


def build_generators(providers: List[str], settings: Optional[Settings] = None) -> List:
    """Build every configured provider in order, skipping ones without keys."""
    generators = []
    skipped: Dict[str, str] = {}
    for name in providers:
        try:
            generators.append(build_generator(name, settings))
        except ProviderNotConfigured as e:
            skipped[name] = str(e)
    if skipped:
        logger.warning(f"Skipped unconfigured rewrite providers: {skipped}")
    return generators
