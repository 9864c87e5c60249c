"""
CommentLens API - Analytics chat routes.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from commentlens.api.deps import get_chat_service
from commentlens.core.config import get_settings
from commentlens.core.exceptions import AuthenticationRequired, EmptyMessage
from commentlens.core.security import get_optional_user_id
from commentlens.schemas.schemas import ChatRequest, ChatResponse, ErrorResponse, TemplateSchema
from commentlens.services.analytics.orchestrator import AnalyticsChatService
from commentlens.services.analytics.templates import list_templates

settings = get_settings()

router = APIRouter(prefix="/chat", tags=["Chat"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ChatRequest.model_json_schema()}},
        },
    },
)
async def chat(
    request: Request,
    user_id: Optional[int] = Depends(get_optional_user_id),
    service: AnalyticsChatService = Depends(get_chat_service),
):
    """
    Answer a question about the signed-in creator's comments.

    The body is parsed here rather than by FastAPI so that identity is
    checked first and malformed input gets the same 400 ``{error}`` shape
    as a blank message.
    """
    if user_id is None:
        return _error(401, "Unauthorized")

    try:
        data = ChatRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return _error(400, "Message must be a JSON string field")

    if len(data.message) > settings.max_message_length:
        return _error(400, "Message is too long")
    try:
        answer = await service.answer(user_id, data.message)
    except AuthenticationRequired as e:
        return _error(401, str(e))
    except EmptyMessage as e:
        return _error(400, str(e))

    return ChatResponse(
        response=answer.response,
        timestamp=datetime.now(timezone.utc),
        template_id=answer.template_id,
    )


@router.get("/templates", response_model=List[TemplateSchema])
async def templates():
    """The fixed set of questions the chat can answer from data."""
    return [TemplateSchema(id=t.id.value, description=t.description) for t in list_templates()]
