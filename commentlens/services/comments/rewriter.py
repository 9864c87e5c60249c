"""
Pass 2 of the comment transformation: the empathic rewrite, with video
context and provider fallback.
"""
from __future__ import annotations

import logging
from typing import Optional

from commentlens.core.metrics import REWRITE_FALLBACKS
from commentlens.llm.fallback import FallbackChain
from commentlens.services.comments.prompts import EMPATHIC_SYSTEM_PROMPT, VIDEO_CONTEXT_GUIDANCE

logger = logging.getLogger(__name__)


def build_system_prompt(
    video_title: Optional[str] = None,
    video_description: Optional[str] = None,
    description_chars: int = 300,
) -> str:
    """Rewrite instructions plus a VIDEO CONTEXT section when any context is known."""
    description = None
    if video_description:
        description = video_description[:description_chars]
        if len(video_description) > description_chars:
            description += "..."

    if not video_title and not description:
        return EMPATHIC_SYSTEM_PROMPT

    lines = ["", "", "VIDEO CONTEXT:"]
    if video_title:
        lines.append(f'Title: "{video_title}"')
    if description:
        lines.append(f'Description: "{description}"')
    return EMPATHIC_SYSTEM_PROMPT + "\n".join(lines) + "\n" + VIDEO_CONTEXT_GUIDANCE


class EmpathicRewriter:

    def __init__(self, chain: FallbackChain, description_chars: int = 300):
        self.chain = chain
        self.description_chars = description_chars

    async def rewrite(
        self,
        text: str,
        video_title: Optional[str] = None,
        video_description: Optional[str] = None,
    ) -> str:
        """Return the rewrite, or ``text`` unchanged when every provider failed."""
        if not self.chain.providers:
            REWRITE_FALLBACKS.labels(reason="no_providers").inc()
            return text

        system_prompt = build_system_prompt(video_title, video_description, self.description_chars)
        rewritten = await self.chain.run(system_prompt, text)
        if rewritten is None:
            logger.warning(
                f"All rewrite providers failed ({', '.join(self.chain.provider_names)}), keeping original"
            )
            REWRITE_FALLBACKS.labels(reason="providers_exhausted").inc()
            return text
        return rewritten
