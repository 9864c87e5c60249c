"""
CommentLens Query Template Registry

Fifteen fixed, parameterised read queries over the comment store. The
analytics chat may only ever run one of these; the LLM chooses which one
and supplies sanitised ``QueryParams``, never SQL.

Every statement is scoped to the requesting user's comments.
"""
from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy import func, select

from commentlens.models.models import Comment, Platform, Sentiment
from commentlens.services.analytics.params import QueryParams, contains_pattern
from commentlens.services.analytics.sql import bucket_label, period_bucket
from commentlens.services.comments.comment_store import CommentStore

LIKE_ESCAPE = "\\"


class TemplateId(str, enum.Enum):
    TOP_COMMENTERS = "top_commenters"
    MOST_POPULAR_VIDEOS = "most_popular_videos"
    SEARCH_COMMENTS = "search_comments"
    SENTIMENT_BREAKDOWN = "sentiment_breakdown"
    NEGATIVE_COMMENTS = "negative_comments"
    POSITIVE_COMMENTS = "positive_comments"
    CONSTRUCTIVE_COMMENTS = "constructive_comments"
    RECENT_COMMENTS = "recent_comments"
    COMMENTS_BY_VIDEO = "comments_by_video"
    COMMENT_VOLUME_OVER_TIME = "comment_volume_over_time"
    REPLY_ANALYSIS = "reply_analysis"
    FEEDBACK_STATS = "feedback_stats"
    PLATFORM_COMPARISON = "platform_comparison"
    TRANSFORMED_VS_ORIGINAL = "transformed_vs_original"
    COMPREHENSIVE_ANALYSIS = "comprehensive_analysis"


Executor = Callable[[CommentStore, int, QueryParams], Awaitable[Any]]


@dataclass(frozen=True)
class QueryTemplate:
    id: TemplateId
    description: str
    execute: Executor


# ── Shared fragments ─────────────────────────────────────────────────────

def _scope(user_id: int, params: QueryParams) -> list:
    conditions = [Comment.user_id == user_id]
    if params.platform:
        conditions.append(Comment.platform == Platform(params.platform))
    return conditions


def _day_start(value: str) -> datetime:
    return datetime.combine(date.fromisoformat(value), time.min, tzinfo=timezone.utc)


def _comment_listing(*columns, sentiment: Optional[Sentiment] = None):
    """
    Select of the given columns, optionally filtered to one sentiment.
    Callers add user scope and ordering.
    """
    stmt = select(*columns)
    if sentiment is not None:
        stmt = stmt.where(Comment.sentiment == sentiment)
    return stmt


_VIDEO_TITLE = Comment.video_title.label("video_title")
_COMMENT_COUNT = func.count(Comment.id).label("comment_count")


def _newest_first(stmt, limit: int):
    return stmt.order_by(Comment.created_at.desc(), Comment.id.desc()).limit(limit)


def _sentiment_counts(user_id: int, params: QueryParams):
    return (
        select(Comment.sentiment.label("sentiment"), func.count(Comment.id).label("count"))
        .where(*_scope(user_id, params), Comment.sentiment.is_not(None))
        .group_by(Comment.sentiment)
        .order_by(func.count(Comment.id).desc(), Comment.sentiment)
    )


def _top_commenters_stmt(user_id: int, params: QueryParams, limit: int):
    return (
        select(Comment.author.label("author"), _COMMENT_COUNT)
        .where(*_scope(user_id, params), Comment.is_owner.is_(False))
        .group_by(Comment.author)
        .order_by(_COMMENT_COUNT.desc(), Comment.author)
        .limit(limit)
    )


def _popular_videos_stmt(user_id: int, params: QueryParams, limit: int):
    return (
        select(
            _VIDEO_TITLE,
            Comment.video_id.label("video_id"),
            Comment.platform.label("platform"),
            _COMMENT_COUNT,
        )
        .where(*_scope(user_id, params))
        .group_by(Comment.video_title, Comment.video_id, Comment.platform)
        .order_by(_COMMENT_COUNT.desc(), Comment.video_title)
        .limit(limit)
    )


# ── Templates ────────────────────────────────────────────────────────────

async def _top_commenters(store: CommentStore, user_id: int, params: QueryParams):
    return await store.fetch_all(_top_commenters_stmt(user_id, params, params.limit or 10))


async def _most_popular_videos(store: CommentStore, user_id: int, params: QueryParams):
    return await store.fetch_all(_popular_videos_stmt(user_id, params, params.limit or 10))


async def _search_comments(store: CommentStore, user_id: int, params: QueryParams):
    # Without a keyword the substring filter would match every comment.
    if not params.keyword:
        return []
    stmt = _comment_listing(
        Comment.author, Comment.text, Comment.sentiment, _VIDEO_TITLE, Comment.created_at,
    ).where(
        *_scope(user_id, params),
        Comment.text.ilike(contains_pattern(params.keyword), escape=LIKE_ESCAPE),
    )
    return await store.fetch_all(_newest_first(stmt, params.limit or 20))


async def _sentiment_breakdown(store: CommentStore, user_id: int, params: QueryParams):
    return await store.fetch_all(_sentiment_counts(user_id, params))


async def _negative_comments(store: CommentStore, user_id: int, params: QueryParams):
    stmt = _comment_listing(
        Comment.author, Comment.text, Comment.empathic_text, _VIDEO_TITLE, Comment.created_at,
        sentiment=Sentiment.NEGATIVE,
    ).where(*_scope(user_id, params))
    if params.start_date:
        stmt = stmt.where(Comment.created_at >= _day_start(params.start_date))
    if params.end_date:
        # endDate names a whole day
        stmt = stmt.where(Comment.created_at < _day_start(params.end_date) + timedelta(days=1))
    return await store.fetch_all(_newest_first(stmt, params.limit or 20))


async def _positive_comments(store: CommentStore, user_id: int, params: QueryParams):
    stmt = _comment_listing(
        Comment.author, Comment.text, _VIDEO_TITLE, Comment.created_at,
        sentiment=Sentiment.POSITIVE,
    ).where(*_scope(user_id, params))
    return await store.fetch_all(_newest_first(stmt, params.limit or 20))


async def _constructive_comments(store: CommentStore, user_id: int, params: QueryParams):
    stmt = _comment_listing(
        Comment.author, Comment.text, Comment.empathic_text, _VIDEO_TITLE, Comment.created_at,
        sentiment=Sentiment.CONSTRUCTIVE,
    ).where(*_scope(user_id, params))
    return await store.fetch_all(_newest_first(stmt, params.limit or 20))


async def _recent_comments(store: CommentStore, user_id: int, params: QueryParams):
    stmt = _comment_listing(
        Comment.author, Comment.text, Comment.sentiment, _VIDEO_TITLE,
        Comment.platform, Comment.created_at,
    ).where(*_scope(user_id, params))
    return await store.fetch_all(_newest_first(stmt, params.limit or 20))


async def _comments_by_video(store: CommentStore, user_id: int, params: QueryParams):
    stmt = _comment_listing(
        Comment.author, Comment.text, Comment.sentiment, Comment.empathic_text,
        Comment.created_at, Comment.reply_count,
    ).where(*_scope(user_id, params))
    if params.video_id:
        stmt = stmt.where(Comment.video_id == params.video_id)
    elif params.video_title:
        stmt = stmt.where(
            Comment.video_title.ilike(contains_pattern(params.video_title), escape=LIKE_ESCAPE)
        )
    return await store.fetch_all(_newest_first(stmt, params.limit or 50))


async def _comment_volume_over_time(store: CommentStore, user_id: int, params: QueryParams):
    period = params.period or "week"
    bucket = period_bucket(period, Comment.created_at)
    stmt = (
        select(bucket.label("period"), func.count(Comment.id).label("count"))
        .where(*_scope(user_id, params))
        .group_by(bucket)
        .order_by(bucket)
    )
    rows = await store.fetch_all(stmt)
    return [{"period": bucket_label(r["period"]), "count": r["count"]} for r in rows]


async def _reply_analysis(store: CommentStore, user_id: int, params: QueryParams):
    stmt = (
        select(
            Comment.author, Comment.text, Comment.reply_count, _VIDEO_TITLE, Comment.created_at,
        )
        .where(*_scope(user_id, params), Comment.is_reply.is_(False))
        .order_by(Comment.reply_count.desc(), Comment.created_at.desc())
        .limit(params.limit or 10)
    )
    return await store.fetch_all(stmt)


async def _feedback_stats(store: CommentStore, user_id: int, params: QueryParams):
    stmt = (
        select(Comment.feedback.label("feedback"), func.count(Comment.id).label("count"))
        .where(*_scope(user_id, params), Comment.feedback.is_not(None))
        .group_by(Comment.feedback)
        .order_by(Comment.feedback)
    )
    return await store.fetch_all(stmt)


async def _platform_comparison(store: CommentStore, user_id: int, params: QueryParams):
    by_platform = await store.fetch_all(
        select(Comment.platform.label("platform"), func.count(Comment.id).label("count"))
        .where(*_scope(user_id, params))
        .group_by(Comment.platform)
        .order_by(Comment.platform)
    )
    sentiment_by_platform = await store.fetch_all(
        select(
            Comment.platform.label("platform"),
            Comment.sentiment.label("sentiment"),
            func.count(Comment.id).label("count"),
        )
        .where(*_scope(user_id, params), Comment.sentiment.is_not(None))
        .group_by(Comment.platform, Comment.sentiment)
        .order_by(Comment.platform, Comment.sentiment)
    )
    return {"counts_by_platform": by_platform, "sentiment_by_platform": sentiment_by_platform}


async def _transformed_vs_original(store: CommentStore, user_id: int, params: QueryParams):
    stmt = _comment_listing(
        Comment.author,
        Comment.text.label("original_text"),
        Comment.empathic_text,
        Comment.sentiment,
        _VIDEO_TITLE,
        Comment.created_at,
    ).where(
        *_scope(user_id, params),
        Comment.empathic_text.is_not(None),
        Comment.empathic_text != Comment.text,
    )
    return await store.fetch_all(_newest_first(stmt, params.limit or 20))


async def _comprehensive_analysis(store: CommentStore, user_id: int, params: QueryParams):
    recent_negative = _newest_first(
        _comment_listing(
            Comment.author, Comment.text, _VIDEO_TITLE, Comment.created_at,
            sentiment=Sentiment.NEGATIVE,
        ).where(*_scope(user_id, params)),
        10,
    )
    total = select(func.count(Comment.id)).where(*_scope(user_id, params))

    sentiments, top_videos, negatives, commenters, total_count = await asyncio.gather(
        store.fetch_all(_sentiment_counts(user_id, params)),
        store.fetch_all(_popular_videos_stmt(user_id, params, 5)),
        store.fetch_all(recent_negative),
        store.fetch_all(_top_commenters_stmt(user_id, params, 5)),
        store.fetch_scalar(total),
    )
    return {
        "sentiments": sentiments,
        "top_videos": top_videos,
        "recent_negative": negatives,
        "top_commenters": commenters,
        "total_comments": int(total_count or 0),
    }


# ── Registry ─────────────────────────────────────────────────────────────

QUERY_TEMPLATES: Dict[TemplateId, QueryTemplate] = {
    t.id: t for t in (
        QueryTemplate(TemplateId.TOP_COMMENTERS,
                      "Most active commenters on their content", _top_commenters),
        QueryTemplate(TemplateId.MOST_POPULAR_VIDEOS,
                      "Videos with the most comments", _most_popular_videos),
        QueryTemplate(TemplateId.SEARCH_COMMENTS,
                      "Find comments mentioning a keyword or phrase", _search_comments),
        QueryTemplate(TemplateId.SENTIMENT_BREAKDOWN,
                      "Overall sentiment distribution", _sentiment_breakdown),
        QueryTemplate(TemplateId.NEGATIVE_COMMENTS,
                      "Negative or harsh comments, optionally within a date range", _negative_comments),
        QueryTemplate(TemplateId.POSITIVE_COMMENTS,
                      "Positive and supportive comments", _positive_comments),
        QueryTemplate(TemplateId.CONSTRUCTIVE_COMMENTS,
                      "Constructive feedback and suggestions", _constructive_comments),
        QueryTemplate(TemplateId.RECENT_COMMENTS,
                      "Latest comments across all content", _recent_comments),
        QueryTemplate(TemplateId.COMMENTS_BY_VIDEO,
                      "Comments on a specific video", _comments_by_video),
        QueryTemplate(TemplateId.COMMENT_VOLUME_OVER_TIME,
                      "Comment volume by week or month", _comment_volume_over_time),
        QueryTemplate(TemplateId.REPLY_ANALYSIS,
                      "Top-level comments with the most replies", _reply_analysis),
        QueryTemplate(TemplateId.FEEDBACK_STATS,
                      "Thumbs up/down counts on empathic rewrites", _feedback_stats),
        QueryTemplate(TemplateId.PLATFORM_COMPARISON,
                      "YouTube vs Instagram breakdown", _platform_comparison),
        QueryTemplate(TemplateId.TRANSFORMED_VS_ORIGINAL,
                      "Original comments next to their empathic rewrites", _transformed_vs_original),
        QueryTemplate(TemplateId.COMPREHENSIVE_ANALYSIS,
                      "Full report: sentiment, top videos, recent negatives, top commenters, total",
                      _comprehensive_analysis),
    )
}

_missing = set(TemplateId) - set(QUERY_TEMPLATES)
if _missing:
    raise RuntimeError(f"Query templates not registered: {sorted(m.value for m in _missing)}")


def get_template(template_id: Any) -> Optional[QueryTemplate]:
    """Look up a template by id. Unknown ids, including non-strings, give None."""
    if not isinstance(template_id, str):
        return None
    try:
        return QUERY_TEMPLATES[TemplateId(template_id)]
    except ValueError:
        return None


def list_templates() -> List[QueryTemplate]:
    return list(QUERY_TEMPLATES.values())
