"""Tests for child relations and the commit index."""

from lanegraph.graph.children import CommitIndex, build_child_relations
from lanegraph.graph.models import ChildKind, Commit


def make_commit(hash, *parents):
    return Commit(hash=hash, parents=tuple(parents))


class TestBuildChildRelations:
    """Test build_child_relations."""

    def test_linear_chain(self):
        relations = build_child_relations([make_commit("c2", "c1"), make_commit("c1")])
        assert relations["c1"].children == ["c2"]
        assert relations["c1"].branch_children == ["c2"]
        assert relations["c2"].is_branch_head

    def test_merge_children_are_tagged(self):
        """Parent at index >= 1 registers a merge child."""
        commits = [
            make_commit("m", "a", "b"),
            make_commit("a"),
            make_commit("b"),
        ]
        relations = build_child_relations(commits)
        assert relations["a"].links[0].kind is ChildKind.BRANCH
        assert relations["b"].links[0].kind is ChildKind.MERGE
        assert relations["b"].merge_children == ["m"]
        assert relations["b"].has_only_merge_children
        assert not relations["a"].has_only_merge_children

    def test_dangling_parent_is_dropped(self):
        """A parent outside the set gets no entry and raises nothing."""
        relations = build_child_relations([make_commit("c2", "missing")])
        assert set(relations) == {"c2"}
        assert relations["c2"].is_branch_head

    def test_every_commit_has_an_entry(self):
        commits = [make_commit("x"), make_commit("y"), make_commit("z", "x")]
        assert set(build_child_relations(commits)) == {"x", "y", "z"}


class TestCommitIndex:
    """Test CommitIndex lookups."""

    def test_rows_follow_given_order(self):
        index = CommitIndex([make_commit("c2", "c1"), make_commit("c1")])
        assert index.row == {"c2": 0, "c1": 1}
        assert len(index) == 2

    def test_parents_filtered_to_known(self):
        index = CommitIndex([make_commit("m", "a", "gone"), make_commit("a")])
        assert index.parents("m") == ["a"]
        assert index.first_parent("m") == "a"
        assert "gone" not in index

    def test_first_parent_outside_history(self):
        index = CommitIndex([make_commit("c2", "gone")])
        assert index.first_parent("c2") is None

    def test_merges_oldest_first(self):
        index = CommitIndex(
            [
                make_commit("m2", "m1", "x"),
                make_commit("x", "m1"),
                make_commit("m1", "r", "y"),
                make_commit("y", "r"),
                make_commit("r"),
            ]
        )
        assert [c.hash for c in index.merges_oldest_first()] == ["m1", "m2"]
