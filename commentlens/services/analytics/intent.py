"""
CommentLens Intent Classifier

Maps a free-text analytics question to ``{template_id, params}`` using the
chat model. The model's JSON is untrusted: it is decoded against a strict
schema, and anything that fails to decode is treated as general chat.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from commentlens.core.exceptions import LLMError
from commentlens.llm.base import TextGenerator, generate_with_timeout
from commentlens.services.analytics.prompts import INTENT_CLASSIFIER_PROMPT

logger = logging.getLogger(__name__)

GENERAL_CHAT = "general_chat"

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?\s*```$", re.DOTALL)


@dataclass(frozen=True)
class ClassificationResult:
    template_id: str
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_general_chat(self) -> bool:
        return self.template_id == GENERAL_CHAT


@dataclass(frozen=True)
class DecodeFailure:
    reason: str
    raw: str


class _ClassifierOutput(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    template_id: str = Field(alias="templateId", min_length=1)
    params: Optional[Dict[str, Any]] = None


def strip_code_fence(text: str) -> str:
    text = text.strip()
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def decode_classification(raw_text: str) -> Union[ClassificationResult, DecodeFailure]:
    """Decode the classifier's reply. Never raises."""
    if not isinstance(raw_text, str):
        return DecodeFailure("reply is not text", repr(raw_text))
    body = strip_code_fence(raw_text)
    try:
        decoded = _ClassifierOutput.model_validate_json(body, strict=True)
    except ValidationError as e:
        return DecodeFailure(f"invalid classifier JSON: {e.error_count()} error(s)", raw_text)
    return ClassificationResult(decoded.template_id.strip(), decoded.params or {})


class IntentClassifier:

    def __init__(self, generator: TextGenerator, timeout: float = 30.0):
        self.generator = generator
        self.timeout = timeout

    async def classify(self, question: str) -> ClassificationResult:
        """Classify ``question``; model errors and bad JSON yield general chat."""
        try:
            raw = await generate_with_timeout(
                self.generator, INTENT_CLASSIFIER_PROMPT, question,
                timeout=self.timeout, purpose="intent",
            )
        except LLMError as e:
            logger.warning(f"Intent classification failed, using general chat: {e}")
            return ClassificationResult(GENERAL_CHAT)

        decoded = decode_classification(raw)
        if isinstance(decoded, DecodeFailure):
            logger.warning(f"Intent decode failed ({decoded.reason}): {decoded.raw[:200]!r}")
            return ClassificationResult(GENERAL_CHAT)
        return decoded
