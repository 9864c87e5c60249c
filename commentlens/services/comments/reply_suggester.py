"""
CommentLens Reply Suggestion Service

Drafts a short reply the creator can post back to one of their comments.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from commentlens.core.exceptions import LLMError
from commentlens.llm.base import TextGenerator, generate_with_timeout
from commentlens.services.comments.prompts import REPLY_SUGGESTION_PROMPT

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Thank you so much for watching and taking the time to comment!"


@dataclass(frozen=True)
class ReplySuggestion:
    text: str
    generated: bool


def build_reply_request(author: str, text: str, video_title: Optional[str] = None) -> str:
    lines = [
        "Generate a reply to this comment:",
        "",
        f'Comment by {author}: "{text}"',
    ]
    if video_title:
        lines.append(f'On video: "{video_title}"')
    lines += ["", "Reply:"]
    return "\n".join(lines)


class ReplySuggester:

    def __init__(self, generator: TextGenerator, timeout: float = 30.0):
        self.generator = generator
        self.timeout = timeout

    async def suggest(self, comment: Any) -> ReplySuggestion:
        """Suggest a reply to ``comment``; a failed call yields ``FALLBACK_REPLY``."""
        request = build_reply_request(comment.author, comment.text, comment.video_title)
        try:
            raw = await generate_with_timeout(
                self.generator, REPLY_SUGGESTION_PROMPT, request,
                timeout=self.timeout, purpose="reply",
            )
        except LLMError as e:
            logger.warning(f"Reply suggestion failed for comment {comment.id}: {e}")
            return ReplySuggestion(FALLBACK_REPLY, generated=False)

        reply = raw.strip().strip('"').strip()
        if not reply:
            return ReplySuggestion(FALLBACK_REPLY, generated=False)
        return ReplySuggestion(reply, generated=True)
