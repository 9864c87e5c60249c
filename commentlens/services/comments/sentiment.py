"""
Pass 1 of the comment transformation: sentiment classification.

The model must answer with exactly one label. Anything else, including a
failed or timed-out call, is read as NEGATIVE so the comment still gets
rewritten.
"""
from __future__ import annotations

import enum
import logging

from commentlens.core.exceptions import LLMError
from commentlens.llm.base import TextGenerator, generate_with_timeout
from commentlens.models.models import Sentiment
from commentlens.services.comments.prompts import CLASSIFICATION_PROMPT

logger = logging.getLogger(__name__)


class SentimentLabel(str, enum.Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"
    SEXUAL = "SEXUAL"

    def to_storage(self) -> Sentiment:
        if self is SentimentLabel.POSITIVE:
            return Sentiment.POSITIVE
        if self is SentimentLabel.NEUTRAL:
            return Sentiment.NEUTRAL
        return Sentiment.NEGATIVE

    @property
    def needs_rewrite(self) -> bool:
        return self is not SentimentLabel.POSITIVE


def parse_label(raw: str) -> SentimentLabel:
    token = (raw or "").strip().upper()
    try:
        return SentimentLabel(token)
    except ValueError:
        logger.info(f"Unclear classification {raw!r}, defaulting to NEGATIVE")
        return SentimentLabel.NEGATIVE


class SentimentClassifier:

    def __init__(self, generator: TextGenerator, timeout: float = 30.0):
        self.generator = generator
        self.timeout = timeout

    async def classify(self, text: str) -> SentimentLabel:
        try:
            raw = await generate_with_timeout(
                self.generator, CLASSIFICATION_PROMPT, text,
                timeout=self.timeout, purpose="classify",
            )
        except LLMError as e:
            logger.warning(f"Sentiment classification failed, defaulting to NEGATIVE: {e}")
            return SentimentLabel.NEGATIVE
        return parse_label(raw)
