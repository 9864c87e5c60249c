"""
CommentLens Comment Transform Service

Batch entry point for the classify -> rewrite pipeline.

Items are processed in fixed-size batches. Inside a batch every
classification runs concurrently, then every rewrite of the non-positive
subset runs concurrently. Batches run one after another, so peak in-flight
model calls never exceed the batch size and progress can be reported after
each batch.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from commentlens.services.comments.rewriter import EmpathicRewriter
from commentlens.services.comments.sentiment import SentimentClassifier, SentimentLabel
from commentlens.services.comments.text_cleanup import clean_comment_text

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class TransformItem:
    id: Any
    text: str
    video_title: Optional[str] = None
    video_description: Optional[str] = None
    is_owner: bool = False


@dataclass(frozen=True)
class TransformResult:
    id: Any
    text: str
    empathic_text: str
    skipped: bool
    sentiment: Optional[str]


class CommentTransformService:

    def __init__(
        self,
        classifier: SentimentClassifier,
        rewriter: EmpathicRewriter,
        batch_size: int = 5,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.classifier = classifier
        self.rewriter = rewriter
        self.batch_size = batch_size

    async def transform_batch(
        self,
        items: Sequence[TransformItem],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Dict[Any, TransformResult]:
        """
        Transform ``items`` and return results keyed by item id, in input order.

        ``on_progress(completed, total)`` fires once per item, after the
        batch containing it has finished. Owner comments are passed through
        without any model call.
        """
        total = len(items)
        results: Dict[Any, TransformResult] = {}
        completed = 0

        for start in range(0, total, self.batch_size):
            batch = items[start:start + self.batch_size]
            batch_results = await self._run_batch(batch)
            for result in batch_results:
                results[result.id] = result

            for _ in batch:
                completed += 1
                if on_progress is not None:
                    await _notify(on_progress, completed, total)

        logger.info(
            f"Transformed {total} comments in {(total + self.batch_size - 1) // self.batch_size} batches "
            f"({sum(1 for r in results.values() if r.skipped)} skipped)"
        )
        return results

    async def _run_batch(self, batch: Sequence[TransformItem]) -> List[TransformResult]:
        cleaned = [clean_comment_text(item.text) for item in batch]
        to_classify = [i for i, item in enumerate(batch) if not item.is_owner]

        labels = await asyncio.gather(
            *(self.classifier.classify(cleaned[i]) for i in to_classify)
        )
        label_by_index: Dict[int, SentimentLabel] = dict(zip(to_classify, labels))

        to_rewrite = [i for i in to_classify if label_by_index[i].needs_rewrite]
        rewrites = await asyncio.gather(
            *(
                self.rewriter.rewrite(cleaned[i], batch[i].video_title, batch[i].video_description)
                for i in to_rewrite
            )
        )
        rewrite_by_index = dict(zip(to_rewrite, rewrites))

        out: List[TransformResult] = []
        for i, item in enumerate(batch):
            text = cleaned[i]
            if item.is_owner:
                out.append(TransformResult(item.id, text, text, skipped=True, sentiment=None))
                continue
            label = label_by_index[i]
            if i in rewrite_by_index:
                out.append(TransformResult(
                    item.id, text, rewrite_by_index[i], skipped=False,
                    sentiment=label.to_storage().value,
                ))
            else:
                out.append(TransformResult(
                    item.id, text, text, skipped=True, sentiment=label.to_storage().value,
                ))
        return out


async def _notify(callback: ProgressCallback, completed: int, total: int) -> None:
    outcome = callback(completed, total)
    if inspect.isawaitable(outcome):
        await outcome
