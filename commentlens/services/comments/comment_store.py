"""
CommentLens Comment Store

The only component that talks to the ``comments`` table. Every method is
scoped by the owning user's id. Read helpers open a fresh session per call so
independent queries can run concurrently.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from commentlens.models.models import (
    Comment, Platform, RewriteFeedback, Sentiment, User,
)
from commentlens.schemas.schemas import IncomingComment

logger = logging.getLogger(__name__)

# Columns refreshed when an already-stored comment is synced again. The
# original text and everything derived from it stay untouched.
_REFRESHED_ON_CONFLICT = (
    "author", "author_avatar", "video_title", "video_description", "reply_count",
)


class CommentStore:
    """Async access to a user's comments."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ── Generic reads (used by query templates) ──────────────────────────

    async def fetch_all(self, stmt) -> List[Dict[str, Any]]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

    async def fetch_scalar(self, stmt) -> Any:
        async with self._session_factory() as session:
            return await session.scalar(stmt)

    # ── Ingestion ────────────────────────────────────────────────────────

    async def upsert_comments(
        self, user_id: int, incoming: Sequence[IncomingComment],
    ) -> List[int]:
        """
        Insert or update comments keyed by (user, external id, platform).

        Parents are linked in a second pass so replies may arrive in any
        order within the batch. Returns internal ids in input order.
        """
        ids: List[int] = []
        async with self._session_factory() as session:
            insert_fn = self._insert_for(session)

            for c in incoming:
                values = {
                    "user_id": user_id,
                    "external_id": c.external_id,
                    "platform": Platform(c.platform),
                    "author": c.author,
                    "author_avatar": c.author_avatar,
                    "text": c.text,
                    "empathic_text": c.text if c.is_owner else None,
                    "video_id": c.video_id,
                    "video_title": c.video_title,
                    "video_description": c.video_description,
                    "reply_count": c.reply_count,
                    "is_owner": c.is_owner,
                    "is_reply": c.parent_external_id is not None,
                    "created_at": c.created_at,
                }
                stmt = insert_fn(Comment).values(**values)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Comment.user_id, Comment.external_id, Comment.platform],
                    set_={col: stmt.excluded[col] for col in _REFRESHED_ON_CONFLICT},
                ).returning(Comment.id)
                ids.append((await session.execute(stmt)).scalar_one())

            await self._link_parents(session, user_id, incoming, ids)
            await session.commit()

        logger.info(f"Upserted {len(ids)} comments for user {user_id}")
        return ids

    async def _link_parents(
        self,
        session: AsyncSession,
        user_id: int,
        incoming: Sequence[IncomingComment],
        ids: List[int],
    ) -> None:
        for c, comment_id in zip(incoming, ids):
            if not c.parent_external_id:
                continue
            parent_id = await session.scalar(
                select(Comment.id).where(
                    Comment.user_id == user_id,
                    Comment.external_id == c.parent_external_id,
                    Comment.platform == Platform(c.platform),
                )
            )
            if parent_id is None or parent_id == comment_id:
                logger.warning(
                    f"Reply {c.external_id} references unknown parent {c.parent_external_id}"
                )
                continue
            await session.execute(
                update(Comment)
                .where(Comment.id == comment_id, Comment.user_id == user_id)
                .values(parent_id=parent_id, is_reply=True)
            )

    @staticmethod
    def _insert_for(session: AsyncSession):
        dialect = session.bind.dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"Upsert not supported for dialect '{dialect}'")

    # ── Transformation bookkeeping ───────────────────────────────────────

    async def pending_transformations(self, user_id: int, limit: int = 500) -> List[Comment]:
        """Comments still missing an empathic rewrite, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Comment)
                .where(Comment.user_id == user_id, Comment.empathic_text.is_(None))
                .order_by(Comment.created_at.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def save_transformations(self, user_id: int, results: Iterable[Any]) -> int:
        """
        Persist ``TransformResult`` values. A rewrite is written only while
        ``empathic_text`` is still empty, so concurrent syncs cannot
        overwrite each other.
        """
        updated = 0
        async with self._session_factory() as session:
            for r in results:
                values: Dict[str, Any] = {"empathic_text": r.empathic_text}
                if r.sentiment is not None:
                    values["sentiment"] = Sentiment(r.sentiment)
                result = await session.execute(
                    update(Comment)
                    .where(
                        Comment.id == int(r.id),
                        Comment.user_id == user_id,
                        Comment.empathic_text.is_(None),
                    )
                    .values(**values)
                )
                updated += result.rowcount or 0
            await session.commit()
        return updated

    async def reset_transformations(self, user_id: int) -> int:
        """Clear non-owner rewrites ahead of an explicit bulk regenerate."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(Comment)
                .where(Comment.user_id == user_id, Comment.is_owner.is_(False))
                .values(empathic_text=None, sentiment=None, feedback=None, feedback_at=None)
            )
            await session.commit()
            return result.rowcount or 0

    # ── User interaction ─────────────────────────────────────────────────

    async def get_comment(self, user_id: int, comment_id: int) -> Optional[Comment]:
        async with self._session_factory() as session:
            return await session.scalar(
                select(Comment).where(Comment.id == comment_id, Comment.user_id == user_id)
            )

    async def set_feedback(
        self, user_id: int, comment_id: int, feedback: Optional[str],
    ) -> Optional[Comment]:
        async with self._session_factory() as session:
            comment = await session.scalar(
                select(Comment).where(Comment.id == comment_id, Comment.user_id == user_id)
            )
            if comment is None:
                return None
            comment.feedback = RewriteFeedback(feedback) if feedback else None
            comment.feedback_at = datetime.now(timezone.utc) if feedback else None
            await session.commit()
            return comment

    async def add_owner_reply(
        self,
        user_id: int,
        parent_id: int,
        text: str,
        external_id: Optional[str] = None,
    ) -> Optional[Comment]:
        """Store the creator's own reply. Owner text is never rewritten."""
        async with self._session_factory() as session:
            parent = await session.scalar(
                select(Comment).where(Comment.id == parent_id, Comment.user_id == user_id)
            )
            if parent is None:
                return None

            user = await session.get(User, user_id)
            author = (user.display_name or user.email) if user else "owner"

            reply = Comment(
                user_id=user_id,
                external_id=external_id or f"local:{uuid.uuid4().hex}",
                platform=parent.platform,
                author=author,
                text=text,
                empathic_text=text,
                video_id=parent.video_id,
                video_title=parent.video_title,
                parent_id=parent.id,
                is_reply=True,
                is_owner=True,
                created_at=datetime.now(timezone.utc),
            )
            session.add(reply)
            parent.reply_count = (parent.reply_count or 0) + 1
            await session.commit()
            return reply

    async def delete_comments(self, user_id: int, ids: Optional[Sequence[int]] = None) -> int:
        stmt = delete(Comment).where(Comment.user_id == user_id)
        if ids is not None:
            stmt = stmt.where(Comment.id.in_(list(ids)))
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount or 0

    async def list_comments(self, user_id: int, platform: Optional[str] = None) -> List[Comment]:
        stmt = select(Comment).where(Comment.user_id == user_id)
        if platform:
            stmt = stmt.where(Comment.platform == Platform(platform))
        async with self._session_factory() as session:
            result = await session.execute(stmt.order_by(Comment.created_at.desc(), Comment.id.desc()))
            return list(result.scalars().all())
