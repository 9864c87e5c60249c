"""
CommentLens Celery Worker Tasks

- Comment sync: store fetched platform comments, classify and rewrite them
- Bulk regenerate: redo every non-owner empathic rewrite of a creator
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from celery import Celery
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from commentlens.core.config import Settings, get_settings
from commentlens.core.logging import configure_logging
from commentlens.llm.fallback import FallbackChain, FallbackPolicy
from commentlens.llm.providers import build_generator, build_generators
from commentlens.schemas.schemas import IncomingComment
from commentlens.services.comments.comment_store import CommentStore
from commentlens.services.comments.rewriter import EmpathicRewriter
from commentlens.services.comments.sentiment import SentimentClassifier
from commentlens.services.comments.sync_service import CommentSyncService
from commentlens.services.comments.transform_service import CommentTransformService

settings = get_settings()
logger = logging.getLogger(__name__)

configure_logging()

# ── Celery App ───────────────────────────────────────────────────────────

celery_app = Celery(
    "commentlens",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_soft_time_limit=1800,
    task_time_limit=3600,
    task_default_queue="default",
    task_routes={
        "commentlens.workers.tasks.sync_comments_task": {"queue": "comments"},
        "commentlens.workers.tasks.regenerate_empathic_task": {"queue": "comments"},
    },
)


def run_async(coro):
    """Run an async coroutine from sync Celery task."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def build_transform_service(settings: Settings) -> CommentTransformService:
    classifier = SentimentClassifier(
        build_generator(settings.classifier_provider, settings, max_tokens=settings.classifier_max_tokens),
        timeout=settings.llm_timeout_seconds,
    )
    chain = FallbackChain(
        build_generators(settings.rewrite_providers, settings),
        FallbackPolicy(timeout=settings.llm_timeout_seconds),
    )
    rewriter = EmpathicRewriter(chain, description_chars=settings.context_description_chars)
    return CommentTransformService(classifier, rewriter, batch_size=settings.transform_batch_size)


async def _run_with_sync_service(operation, on_progress):
    # Each task runs on a fresh event loop, so it gets its own engine
    # instead of the API process's pooled one.
    engine = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        service = CommentSyncService(
            CommentStore(async_sessionmaker(engine, expire_on_commit=False)),
            build_transform_service(settings),
            pending_limit=settings.transform_pending_limit,
        )
        return await operation(service, on_progress)
    finally:
        await engine.dispose()


def _progress_reporter(task):
    def report(completed: int, total: int) -> None:
        task.update_state(state="PROGRESS", meta={"completed": completed, "total": total})
    return report


# ── Tasks ────────────────────────────────────────────────────────────────

@celery_app.task(
    name="commentlens.workers.tasks.sync_comments_task",
    bind=True,
    max_retries=3,
    default_retry_delay=30,
    acks_late=True,
)
def sync_comments_task(self, user_id: int, comments: List[Dict[str, Any]]):
    """Store fetched comments and transform the ones without a rewrite."""
    try:
        incoming = [IncomingComment.model_validate(c) for c in comments]
        logger.info(f"Syncing {len(incoming)} comments for user {user_id}")
        stats = run_async(_run_with_sync_service(
            lambda service, progress: service.sync(user_id, incoming, progress),
            _progress_reporter(self),
        ))
        logger.info(f"Comment sync complete for user {user_id}: {stats}")
        return stats
    except Exception as exc:
        logger.error(f"Comment sync failed for user {user_id}: {exc}")
        raise self.retry(exc=exc, countdown=30 * (2 ** self.request.retries))


@celery_app.task(
    name="commentlens.workers.tasks.regenerate_empathic_task",
    bind=True,
    max_retries=2,
    acks_late=True,
)
def regenerate_empathic_task(self, user_id: int):
    """Clear and recompute every non-owner empathic rewrite for a creator."""
    try:
        logger.info(f"Regenerating empathic rewrites for user {user_id}")
        stats = run_async(_run_with_sync_service(
            lambda service, progress: service.regenerate(user_id, progress),
            _progress_reporter(self),
        ))
        logger.info(f"Regenerate complete for user {user_id}: {stats}")
        return stats
    except Exception as exc:
        logger.error(f"Regenerate failed for user {user_id}: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))
