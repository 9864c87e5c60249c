"""
Ordered provider fallback.

A ``FallbackChain`` tries each generator in turn; the ``FallbackPolicy``
decides how long a provider may take and what counts as a usable answer.
When every provider fails the chain returns ``None`` and the caller applies
its own passthrough.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from commentlens.core.exceptions import LLMError
from commentlens.llm.base import TextGenerator, generate_with_timeout

logger = logging.getLogger(__name__)


def _non_empty(text: str) -> bool:
    return bool(text and text.strip())


@dataclass(frozen=True)
class FallbackPolicy:
    timeout: float = 30.0
    accept: Callable[[str], bool] = field(default=_non_empty)
    purpose: str = "rewrite"


class FallbackChain:
    """Primary → secondary → ... provider chain. Holds no per-call state."""

    def __init__(self, providers: Sequence[TextGenerator], policy: Optional[FallbackPolicy] = None):
        self.providers: List[TextGenerator] = list(providers)
        self.policy = policy or FallbackPolicy()

    @property
    def provider_names(self) -> List[str]:
        return [getattr(p, "name", type(p).__name__) for p in self.providers]

    async def run(self, system_prompt: str, user_content: str) -> Optional[str]:
        """Return the first accepted answer, or None once every provider failed."""
        for provider in self.providers:
            name = getattr(provider, "name", type(provider).__name__)
            try:
                text = await generate_with_timeout(
                    provider, system_prompt, user_content,
                    timeout=self.policy.timeout, purpose=self.policy.purpose,
                )
            except LLMError as e:
                logger.warning(f"Provider {name} failed, trying next: {e}")
                continue

            if not self.policy.accept(text):
                logger.warning(f"Provider {name} answer rejected by policy, trying next")
                continue

            return text.strip()

        return None
