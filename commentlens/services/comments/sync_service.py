"""
CommentLens Comment Sync Service

Persists comments fetched from a platform and fills in their sentiment and
empathic rewrite. Fetching itself (YouTube/Instagram API clients) happens
upstream; this service receives already-fetched comments.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from commentlens.schemas.schemas import IncomingComment
from commentlens.services.comments.comment_store import CommentStore
from commentlens.services.comments.text_cleanup import clean_comment_text
from commentlens.services.comments.transform_service import (
    CommentTransformService, ProgressCallback, TransformItem,
)

logger = logging.getLogger(__name__)


class CommentSyncService:

    def __init__(
        self,
        store: CommentStore,
        transformer: CommentTransformService,
        pending_limit: int = 500,
    ):
        self.store = store
        self.transformer = transformer
        self.pending_limit = pending_limit

    async def sync(
        self,
        user_id: int,
        incoming: Sequence[IncomingComment],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, int]:
        """Upsert ``incoming`` then transform every comment still lacking a rewrite."""
        cleaned = [c.model_copy(update={"text": clean_comment_text(c.text)}) for c in incoming]
        ids = await self.store.upsert_comments(user_id, cleaned)

        stats = await self._transform_pending(user_id, on_progress)
        stats.update(fetched=len(incoming), stored=len(set(ids)))
        logger.info(f"Sync complete for user {user_id}: {stats}")
        return stats

    async def regenerate(
        self,
        user_id: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, int]:
        """Explicit bulk regenerate: drop existing rewrites and run the pipeline again."""
        reset = await self.store.reset_transformations(user_id)
        logger.info(f"Cleared {reset} rewrites for user {user_id}")

        stats = await self._transform_pending(user_id, on_progress)
        stats.update(fetched=0, stored=0)
        return stats

    async def _transform_pending(
        self, user_id: int, on_progress: Optional[ProgressCallback],
    ) -> Dict[str, int]:
        """
        Transform pending comments in rounds of ``pending_limit`` until none
        are left. Progress counts run across rounds.
        """
        stats = {"transformed": 0, "skipped": 0}
        done_before = 0

        while True:
            pending = await self.store.pending_transformations(user_id, self.pending_limit)
            if not pending:
                break

            items = [
                TransformItem(
                    id=c.id,
                    text=c.text,
                    video_title=c.video_title,
                    video_description=c.video_description,
                    is_owner=c.is_owner,
                )
                for c in pending
            ]
            results = await self.transformer.transform_batch(
                items, _offset_progress(on_progress, done_before),
            )
            saved = await self.store.save_transformations(user_id, results.values())

            skipped = sum(1 for r in results.values() if r.skipped)
            stats["transformed"] += len(results) - skipped
            stats["skipped"] += skipped
            done_before += len(results)

            if saved == 0:
                logger.warning(
                    f"No rewrites saved for user {user_id} out of {len(results)} pending; stopping"
                )
                break
            if len(pending) < self.pending_limit:
                break

        return stats


def _offset_progress(
    on_progress: Optional[ProgressCallback], offset: int,
) -> Optional[ProgressCallback]:
    if on_progress is None or offset == 0:
        return on_progress

    def shifted(completed: int, total: int):
        return on_progress(offset + completed, offset + total)

    return shifted
