"""
CommentLens API Schemas - Pydantic v2 models for request/response validation.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from commentlens.models.models import Platform, RewriteFeedback, Sentiment


# ═══════════════════════════════════════════════════════════════════════
# Analytics Chat
# ═══════════════════════════════════════════════════════════════════════

class ChatRequest(BaseModel):
    # Blank messages are rejected by the route with a 400 {error} body,
    # so no min_length here.
    message: str = ""


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    timestamp: datetime
    template_id: Optional[str] = Field(None, alias="templateId")


class ErrorResponse(BaseModel):
    error: str


class TemplateSchema(BaseModel):
    id: str
    description: str


# ═══════════════════════════════════════════════════════════════════════
# Comments
# ═══════════════════════════════════════════════════════════════════════

class IncomingComment(BaseModel):
    """A comment as delivered by a platform fetcher, before storage."""
    external_id: str = Field(..., min_length=1, max_length=256)
    platform: Literal["youtube", "instagram"] = "youtube"
    author: str = Field(..., max_length=256)
    author_avatar: Optional[str] = None
    text: str
    video_id: Optional[str] = None
    video_title: Optional[str] = None
    video_description: Optional[str] = None
    parent_external_id: Optional[str] = None
    reply_count: int = Field(0, ge=0)
    is_owner: bool = False
    created_at: datetime


class CommentIngestRequest(BaseModel):
    comments: List[IncomingComment] = Field(..., min_length=1, max_length=5000)


class CommentTaskResponse(BaseModel):
    status: str = "queued"
    task_id: Optional[str] = None


class CommentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str
    platform: Platform
    author: str
    author_avatar: Optional[str] = None
    text: str
    empathic_text: Optional[str] = None
    sentiment: Optional[Sentiment] = None
    video_id: Optional[str] = None
    video_title: Optional[str] = None
    parent_id: Optional[int] = None
    reply_count: int = 0
    is_owner: bool = False
    feedback: Optional[RewriteFeedback] = None
    created_at: datetime


class CommentThreadSchema(BaseModel):
    comment: CommentSchema
    replies: List["CommentThreadSchema"] = []


class FeedbackUpdate(BaseModel):
    feedback: Optional[Literal["up", "down"]] = None


class FeedbackResponse(BaseModel):
    success: bool = True
    feedback: Optional[str] = None


class ReplySuggestionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    suggested_reply: str = Field(..., alias="suggestedReply")
    comment_id: int = Field(..., alias="commentId")
    generated: bool = True


class OwnerReplyRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=10000)
    external_id: Optional[str] = Field(None, max_length=256)


class BulkDeleteRequest(BaseModel):
    ids: Optional[List[int]] = None


class BulkDeleteResponse(BaseModel):
    deleted: int


CommentThreadSchema.model_rebuild()
