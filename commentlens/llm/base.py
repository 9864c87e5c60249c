"""
Text-generation capability shared by the analytics chat and the comment
rewriting pipeline.

Every consumer receives a ``TextGenerator`` at construction time, so tests
can swap in deterministic doubles.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable

from commentlens.core.exceptions import LLMError
from commentlens.core.metrics import LLM_CALLS

logger = logging.getLogger(__name__)


@runtime_checkable
class TextGenerator(Protocol):
    """``generate(system_prompt, user_content) -> text``."""

    name: str

    async def generate(self, system_prompt: str, user_content: str) -> str:
        ...


async def generate_with_timeout(
    generator: TextGenerator,
    system_prompt: str,
    user_content: str,
    *,
    timeout: float,
    purpose: str,
) -> str:
    """
    Call ``generator`` bounded by ``timeout`` seconds.

    Any failure (SDK error, timeout, blank output) is raised as LLMError so
    callers only need one except clause for their fail-safe path.
    """
    provider = getattr(generator, "name", type(generator).__name__)
    try:
        text = await asyncio.wait_for(
            generator.generate(system_prompt, user_content), timeout=timeout,
        )
    except asyncio.TimeoutError as exc:
        LLM_CALLS.labels(purpose=purpose, provider=provider, outcome="timeout").inc()
        raise LLMError(f"{provider} timed out after {timeout}s ({purpose})") from exc
    except LLMError:
        LLM_CALLS.labels(purpose=purpose, provider=provider, outcome="error").inc()
        raise
    except Exception as exc:
        LLM_CALLS.labels(purpose=purpose, provider=provider, outcome="error").inc()
        raise LLMError(f"{provider} call failed ({purpose}): {exc}") from exc

    if not isinstance(text, str) or not text.strip():
        LLM_CALLS.labels(purpose=purpose, provider=provider, outcome="empty").inc()
        raise LLMError(f"{provider} returned an empty response ({purpose})")

    LLM_CALLS.labels(purpose=purpose, provider=provider, outcome="ok").inc()
    return text
