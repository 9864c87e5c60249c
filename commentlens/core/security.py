"""
Request identity. The login flow that writes ``user_id`` into the signed
session cookie lives outside this service; here we only read it back.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request


def session_user_id(request: Request) -> Optional[int]:
    raw = request.session.get("user_id") if "session" in request.scope else None
    if raw is None or isinstance(raw, bool):
        return None
    try:
        user_id = int(raw)
    except (TypeError, ValueError):
        return None
    return user_id if user_id > 0 else None


async def get_optional_user_id(request: Request) -> Optional[int]:
    return session_user_id(request)


async def get_current_user_id(request: Request) -> int:
    """FastAPI dependency: the signed-in creator's id, else 401."""
    user_id = session_user_id(request)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user_id
