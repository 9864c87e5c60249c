"""Tests for reply-forest assembly."""

from types import SimpleNamespace

from commentlens.services.comments.threads import build_comment_forest


def c(id, parent_id=None):
    return SimpleNamespace(id=id, parent_id=parent_id)


def shape(forest):
    return [(node.comment.id, shape(node.replies)) for node in forest]


class TestBuildCommentForest:

    def test_nests_replies_under_parents(self):
        forest = build_comment_forest([c(1), c(2, 1), c(3, 1), c(4, 2), c(5)])
        assert shape(forest) == [(1, [(2, [(4, [])]), (3, [])]), (5, [])]

    def test_children_listed_before_parent_still_attach(self):
        forest = build_comment_forest([c(4, 2), c(2, 1), c(1)])
        assert shape(forest) == [(1, [(2, [(4, [])])])]

    def test_orphans_become_roots(self):
        forest = build_comment_forest([c(1), c(2, 99)])
        assert shape(forest) == [(1, []), (2, [])]

    def test_self_parent_is_a_root(self):
        assert shape(build_comment_forest([c(1, 1)])) == [(1, [])]

    def test_cycle_is_cut_and_every_comment_appears_once(self):
        forest = build_comment_forest([c(1, 3), c(2, 1), c(3, 2), c(4)])
        ids = []

        def walk(nodes):
            for node in nodes:
                ids.append(node.comment.id)
                walk(node.replies)

        walk(forest)
        assert sorted(ids) == [1, 2, 3, 4]
        assert shape(forest)[0] == (4, [])

    def test_depth_is_bounded(self):
        chain = [c(0)] + [c(i, i - 1) for i in range(1, 10)]
        forest = build_comment_forest(chain, max_depth=3)
        assert shape(forest)[0] == (0, [(1, [(2, [(3, [])])])])
        assert [node.comment.id for node in forest] == [0, 4, 8]

    def test_duplicate_ids_keep_first(self):
        forest = build_comment_forest([c(1), c(1, 5)])
        assert shape(forest) == [(1, [])]

    def test_empty(self):
        assert build_comment_forest([]) == []
