"""
Reply-forest assembly for the comment thread view.

Two phases: index every comment by id and group children by parent, then
assemble trees from the roots. A comment whose parent is not in the input
becomes a root. Comments caught in a parent cycle are never reachable from
a root and are promoted to roots with the cycle cut.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Set

MAX_DEPTH = 50


@dataclass
class CommentNode:
    comment: Any
    replies: List["CommentNode"] = field(default_factory=list)


def build_comment_forest(comments: Sequence[Any], max_depth: int = MAX_DEPTH) -> List[CommentNode]:
    """
    ``comments`` are objects with ``id`` and ``parent_id``. Input order is
    kept among siblings and among roots.
    """
    by_id: Dict[Any, Any] = {}
    for c in comments:
        by_id.setdefault(c.id, c)

    children: Dict[Any, List[Any]] = {}
    roots: List[Any] = []
    for c in by_id.values():
        parent_id = getattr(c, "parent_id", None)
        if parent_id is None or parent_id not in by_id or parent_id == c.id:
            roots.append(c)
        else:
            children.setdefault(parent_id, []).append(c)

    placed: Set[Any] = set()

    def assemble(comment: Any, depth: int) -> CommentNode:
        placed.add(comment.id)
        node = CommentNode(comment)
        if depth >= max_depth:
            return node
        for child in children.get(comment.id, ()):
            if child.id in placed:
                continue
            node.replies.append(assemble(child, depth + 1))
        return node

    forest = [assemble(root, 0) for root in roots]

    # Anything not placed sits on a parent cycle.
    for c in by_id.values():
        if c.id not in placed:
            forest.append(assemble(c, 0))

    return forest

