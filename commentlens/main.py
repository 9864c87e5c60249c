"""
CommentLens - Main FastAPI Application

Comment analytics chat and empathic comment rewriting.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.sessions import SessionMiddleware

from commentlens.core.config import get_settings
from commentlens.core.database import get_db, init_db
from commentlens.core.exceptions import ProviderNotConfigured
from commentlens.core.logging import configure_logging

settings = get_settings()

# ── Logging ──────────────────────────────────────────────────────────────

configure_logging()
logger = structlog.get_logger()


# ── Lifespan ─────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    logger.info("Starting CommentLens", version=settings.app_version)

    await init_db()

    logger.info(
        "CommentLens ready",
        chat_provider=settings.chat_provider,
        classifier_provider=settings.classifier_provider,
        rewrite_providers=settings.rewrite_providers,
    )

    yield

    logger.info("Shutting down CommentLens")


# ── App ──────────────────────────────────────────────────────────────────

app = FastAPI(
    title="CommentLens",
    description="Comment analytics chat and empathic comment rewriting",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Signed cookie session; the login flow that sets user_id is external
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)

# Prometheus metrics
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.exception_handler(ProviderNotConfigured)
async def provider_not_configured_handler(request: Request, exc: ProviderNotConfigured):
    logger.error("Text-generation provider not configured", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=503, content={"error": "Assistant is not configured"})


# ── Routes ───────────────────────────────────────────────────────────────

from commentlens.api.routes import chat, comments

app.include_router(chat.router, prefix=settings.api_prefix)
app.include_router(comments.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {
        "name": "CommentLens",
        "description": "Comment analytics chat and empathic comment rewriting",
        "version": settings.app_version,
        "features": ["analytics_chat", "empathic_rewrite", "comment_threads", "rewrite_feedback"],
        "docs": "/docs",
    }


@app.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "database": "ok"}
