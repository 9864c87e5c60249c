"""Tests for the comment sync service (store + transform pipeline together)."""

from datetime import datetime, timezone

from sqlalchemy import select

from commentlens.llm.fallback import FallbackChain
from commentlens.models.models import Comment, Sentiment
from commentlens.schemas.schemas import IncomingComment
from commentlens.services.comments.rewriter import EmpathicRewriter
from commentlens.services.comments.sentiment import SentimentClassifier
from commentlens.services.comments.sync_service import CommentSyncService
from commentlens.services.comments.transform_service import CommentTransformService


def incoming(external_id, text, **overrides):
    return IncomingComment(
        external_id=external_id,
        author=overrides.pop("author", "viewer"),
        text=text,
        created_at=datetime(2025, 3, 1, tzinfo=timezone.utc),
        **overrides,
    )


async def classify(system_prompt, user_content):
    return "POSITIVE" if "love" in user_content else "NEGATIVE"


def build_sync_service(store, make_generator, rewrite="softened"):
    transformer = CommentTransformService(
        SentimentClassifier(make_generator(classify)),
        EmpathicRewriter(FallbackChain([make_generator(rewrite, name="primary")])),
    )
    return CommentSyncService(store, transformer)


async def all_comments(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(Comment).order_by(Comment.external_id))
        return {c.external_id: c for c in result.scalars()}


class TestCommentSync:

    async def test_sync_stores_and_transforms(self, store, session_factory, user_id, make_generator):
        service = build_sync_service(store, make_generator)
        progress = []

        stats = await service.sync(
            user_id,
            [
                incoming("a", "I love this &amp; you"),
                incoming("b", "this is <b>terrible</b>"),
                incoming("c", "thanks everyone", is_owner=True, author="Creator"),
                incoming("d", "worst take", parent_external_id="a"),
            ],
            on_progress=lambda done, total: progress.append(done),
        )

        assert stats == {"fetched": 4, "stored": 4, "transformed": 2, "skipped": 1}
        # owner rows already carry their rewrite, so only three were pending
        assert progress == [1, 2, 3]

        rows = await all_comments(session_factory)
        assert rows["a"].text == "I love this & you"
        assert rows["a"].empathic_text == "I love this & you"
        assert rows["a"].sentiment is Sentiment.POSITIVE
        assert rows["b"].text == "this is terrible"
        assert rows["b"].empathic_text == "softened"
        assert rows["b"].sentiment is Sentiment.NEGATIVE
        assert rows["c"].empathic_text == "thanks everyone"
        assert rows["c"].sentiment is None
        assert rows["d"].parent_id == rows["a"].id

    async def test_second_sync_does_not_retransform(self, store, user_id, make_generator):
        service = build_sync_service(store, make_generator)
        await service.sync(user_id, [incoming("b", "this is terrible")])

        stats = await service.sync(user_id, [incoming("b", "this is terrible")])
        assert stats == {"fetched": 1, "stored": 1, "transformed": 0, "skipped": 0}

    async def test_rewrite_failure_does_not_block_ingestion(self, store, session_factory, user_id, make_generator):
        service = build_sync_service(store, make_generator, rewrite=RuntimeError("providers down"))
        await service.sync(user_id, [incoming("b", "this is terrible")])

        rows = await all_comments(session_factory)
        assert rows["b"].empathic_text == "this is terrible"

    async def test_regenerate_redoes_viewer_rewrites(self, store, session_factory, user_id, make_generator):
        await build_sync_service(store, make_generator, rewrite="first pass").sync(user_id, [
            incoming("b", "this is terrible"),
            incoming("c", "my reply", is_owner=True),
        ])

        stats = await build_sync_service(store, make_generator, rewrite="second pass").regenerate(user_id)

        assert stats == {"fetched": 0, "stored": 0, "transformed": 1, "skipped": 0}
        rows = await all_comments(session_factory)
        assert rows["b"].empathic_text == "second pass"
        assert rows["c"].empathic_text == "my reply"

    async def test_regenerate_covers_more_than_one_round(self, store, session_factory, user_id, make_generator):
        comments = [incoming(f"c{i}", "this is terrible") for i in range(5)]
        await build_sync_service(store, make_generator, rewrite="first pass").sync(user_id, comments)

        service = build_sync_service(store, make_generator, rewrite="second pass")
        service.pending_limit = 3
        progress = []
        stats = await service.regenerate(user_id, on_progress=lambda done, total: progress.append(done))

        assert stats["transformed"] == 5
        assert progress == [1, 2, 3, 4, 5]
        rows = await all_comments(session_factory)
        assert {key: row.empathic_text for key, row in rows.items()} == {
            f"c{i}": "second pass" for i in range(5)
        }

    async def test_sync_transforms_past_the_pending_limit(self, store, session_factory, user_id, make_generator):
        service = build_sync_service(store, make_generator)
        service.pending_limit = 2

        stats = await service.sync(user_id, [incoming(f"c{i}", "this is terrible") for i in range(5)])

        assert stats["transformed"] == 5
        rows = await all_comments(session_factory)
        assert all(row.empathic_text == "softened" for row in rows.values())
