"""
CommentLens API - Comment Routes

Comment threads and what a creator does with them (feedback on rewrites,
replies and suggested replies), plus the ingestion and regeneration
triggers run by Celery workers.
"""
from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from commentlens.api.deps import get_comment_store, get_reply_suggester
from commentlens.core.security import get_current_user_id
from commentlens.schemas.schemas import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    CommentIngestRequest,
    CommentSchema,
    CommentTaskResponse,
    CommentThreadSchema,
    FeedbackResponse,
    FeedbackUpdate,
    OwnerReplyRequest,
    ReplySuggestionResponse,
)
from commentlens.services.comments.comment_store import CommentStore
from commentlens.services.comments.reply_suggester import ReplySuggester
from commentlens.services.comments.threads import CommentNode, build_comment_forest

router = APIRouter(prefix="/comments", tags=["Comments"])


def _thread_schema(node: CommentNode) -> CommentThreadSchema:
    return CommentThreadSchema(
        comment=CommentSchema.model_validate(node.comment),
        replies=[_thread_schema(child) for child in node.replies],
    )


@router.get("/threads", response_model=List[CommentThreadSchema])
async def list_threads(
    platform: Optional[Literal["youtube", "instagram"]] = Query(None),
    user_id: int = Depends(get_current_user_id),
    store: CommentStore = Depends(get_comment_store),
):
    """All of the creator's comments as a reply forest, newest threads first."""
    comments = await store.list_comments(user_id, platform)
    return [_thread_schema(node) for node in build_comment_forest(comments)]


@router.post("/{comment_id}/feedback", response_model=FeedbackResponse)
async def set_feedback(
    comment_id: int,
    data: FeedbackUpdate,
    user_id: int = Depends(get_current_user_id),
    store: CommentStore = Depends(get_comment_store),
):
    """Thumbs up/down on an empathic rewrite; ``null`` clears it."""
    comment = await store.set_feedback(user_id, comment_id, data.feedback)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return FeedbackResponse(feedback=data.feedback)


@router.post("/{comment_id}/reply", response_model=CommentSchema, status_code=201)
async def reply(
    comment_id: int,
    data: OwnerReplyRequest,
    user_id: int = Depends(get_current_user_id),
    store: CommentStore = Depends(get_comment_store),
):
    """Store the creator's reply. Posting it to the platform happens upstream."""
    comment = await store.add_owner_reply(user_id, comment_id, data.text, data.external_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    return CommentSchema.model_validate(comment)


@router.post("/{comment_id}/suggest-reply", response_model=ReplySuggestionResponse)
async def suggest_reply(
    comment_id: int,
    user_id: int = Depends(get_current_user_id),
    store: CommentStore = Depends(get_comment_store),
    suggester: ReplySuggester = Depends(get_reply_suggester),
):
    """Draft a short reply the creator can edit and post."""
    comment = await store.get_comment(user_id, comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail="Comment not found")
    suggestion = await suggester.suggest(comment)
    return ReplySuggestionResponse(
        suggested_reply=suggestion.text,
        comment_id=comment.id,
        generated=suggestion.generated,
    )


@router.post("/ingest", response_model=CommentTaskResponse, status_code=202)
async def ingest(
    data: CommentIngestRequest,
    user_id: int = Depends(get_current_user_id),
):
    """Queue storage and transformation of freshly fetched platform comments."""
    from commentlens.workers.tasks import sync_comments_task

    task = sync_comments_task.delay(user_id, [c.model_dump(mode="json") for c in data.comments])
    return CommentTaskResponse(task_id=task.id)


@router.post("/regenerate", response_model=CommentTaskResponse, status_code=202)
async def regenerate(user_id: int = Depends(get_current_user_id)):
    """Queue a bulk regenerate of every non-owner rewrite."""
    from commentlens.workers.tasks import regenerate_empathic_task

    task = regenerate_empathic_task.delay(user_id)
    return CommentTaskResponse(task_id=task.id)


@router.delete("", response_model=BulkDeleteResponse)
async def delete_comments(
    data: BulkDeleteRequest,
    user_id: int = Depends(get_current_user_id),
    store: CommentStore = Depends(get_comment_store),
):
    """Delete the listed comments, or all of them when ``ids`` is omitted."""
    deleted = await store.delete_comments(user_id, data.ids)
    return BulkDeleteResponse(deleted=deleted)
