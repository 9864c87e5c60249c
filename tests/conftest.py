"""
Pytest fixtures for CommentLens testing.

Provides:
- A throwaway SQLite database (aiosqlite) with the full schema
- A CommentStore bound to it, plus creators and a comment factory
- Text-generation doubles built on AsyncMock
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from commentlens.core.database import Base
from commentlens.models.models import Comment, Platform, User
from commentlens.services.comments.comment_store import CommentStore


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so concurrent sessions get their own connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'commentlens.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def store(session_factory):
    return CommentStore(session_factory)


async def _create_user(session_factory, email: str) -> int:
    async with session_factory() as session:
        user = User(email=email, display_name=email.split("@")[0].title())
        session.add(user)
        await session.commit()
        return user.id


@pytest.fixture
async def user_id(session_factory):
    return await _create_user(session_factory, "creator@example.com")


@pytest.fixture
async def other_user_id(session_factory):
    return await _create_user(session_factory, "someone.else@example.com")


@pytest.fixture
def add_comments(session_factory):
    """``await add_comments(user_id, {...}, {...})`` inserts rows with sane defaults."""

    async def _add(owner_id: int, *rows: Dict[str, Any]):
        created = []
        async with session_factory() as session:
            for row in rows:
                data = {
                    "external_id": f"ext-{uuid.uuid4().hex[:12]}",
                    "platform": Platform.YOUTUBE,
                    "author": "viewer",
                    "text": "nice video",
                    "created_at": datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc),
                }
                data.update(row)
                comment = Comment(user_id=owner_id, **data)
                session.add(comment)
                created.append(comment)
            await session.commit()
        return created

    return _add


# =============================================================================
# TEXT-GENERATION DOUBLES
# =============================================================================

@pytest.fixture
def make_generator() -> Callable[..., MagicMock]:
    """
    Build a generator double. ``reply`` may be a string, an exception, or a
    callable ``(system_prompt, user_content) -> str``.
    """

    def _make(reply: Any = "", name: str = "stub") -> MagicMock:
        generator = MagicMock()
        generator.name = name
        if callable(reply) and not isinstance(reply, type):
            generator.generate = AsyncMock(side_effect=reply)
        elif isinstance(reply, BaseException) or (isinstance(reply, type) and issubclass(reply, BaseException)):
            generator.generate = AsyncMock(side_effect=reply)
        else:
            generator.generate = AsyncMock(return_value=reply)
        return generator

    return _make
