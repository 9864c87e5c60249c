"""
CommentLens Query Parameter Sanitizer

Turns the untyped ``params`` map produced by the intent classifier into a
bounded ``QueryParams`` value. Every function here is pure and never raises:
a value that fails validation is dropped (``None``) and the template applies
its own default.
"""
from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Mapping, Optional

DEFAULT_STRING_MAX = 200
VIDEO_ID_MAX = 50
LIMIT_MIN = 1
LIMIT_MAX = 500

PLATFORMS = ("youtube", "instagram")
PERIODS = ("week", "month")

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_LIKE_META_RE = re.compile(r"([%_\\])")


@dataclass(frozen=True)
class QueryParams:
    keyword: Optional[str] = None
    video_id: Optional[str] = None
    video_title: Optional[str] = None
    platform: Optional[str] = None
    limit: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    period: Optional[str] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


def sanitize_string(value: Any, max_length: int = DEFAULT_STRING_MAX) -> Optional[str]:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()[:max_length].strip()
    return cleaned or None


def sanitize_number(value: Any, min_value: int = LIMIT_MIN, max_value: int = LIMIT_MAX) -> Optional[int]:
    """Coerce to a number, then floor and clamp into ``[min_value, max_value]``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return max(min_value, min(max_value, value))
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(num):
        return None
    if math.isinf(num):
        return max_value if num > 0 else min_value
    return max(min_value, min(max_value, math.floor(num)))


def sanitize_date(value: Any) -> Optional[str]:
    """Accept exactly ``YYYY-MM-DD`` naming a real calendar day."""
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
        return None
    try:
        date.fromisoformat(value)
    except ValueError:
        return None
    return value


def sanitize_period(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value in PERIODS else None


def sanitize_platform(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value in PLATFORMS else None


def escape_like_pattern(text: str) -> str:
    """Escape ``%``, ``_`` and ``\\`` for use with ``ESCAPE '\\'``."""
    return _LIKE_META_RE.sub(r"\\\1", text)


def contains_pattern(text: str) -> str:
    """Literal substring pattern: ``%<escaped>%``."""
    return f"%{escape_like_pattern(text)}%"


def validate_params(raw: Any) -> QueryParams:
    if not isinstance(raw, Mapping):
        return QueryParams()
    return QueryParams(
        keyword=sanitize_string(raw.get("keyword")),
        video_id=sanitize_string(raw.get("videoId"), VIDEO_ID_MAX),
        video_title=sanitize_string(raw.get("videoTitle")),
        platform=sanitize_platform(raw.get("platform")),
        limit=sanitize_number(raw.get("limit")),
        start_date=sanitize_date(raw.get("startDate")),
        end_date=sanitize_date(raw.get("endDate")),
        period=sanitize_period(raw.get("period")),
    )
