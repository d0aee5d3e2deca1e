"""Tests for base resolution, merge detection and branch order."""

from lanegraph.config import LayoutConfig
from lanegraph.graph.children import CommitIndex
from lanegraph.graph.discovery import discover_branches
from lanegraph.graph.lineage import detect_merges, find_branch_bases, topological_sort_branches
from lanegraph.graph.models import Commit, Ref
from lanegraph.graph.ordering import order_newest_first


def resolve(history, refine=True):
    commits, refs = history
    index = CommitIndex(order_newest_first(commits))
    discovery = discover_branches(refs, index, LayoutConfig(), refine=refine)
    find_branch_bases(discovery, index)
    detect_merges(discovery, index)
    return discovery, topological_sort_branches(discovery, index)


class TestFindBranchBases:
    """Test find_branch_bases."""

    def test_fork_point_and_parent_branch(self, open_branches_history):
        discovery, _ = resolve(open_branches_history)
        for name in ("a", "b"):
            assert discovery.branches[name].base_commit == "m1"
            assert discovery.branches[name].base_branch == "main"
        assert sorted(discovery.branches["main"].child_branches) == ["a", "b"]

    def test_default_branch_has_no_base(self, open_branches_history):
        discovery, _ = resolve(open_branches_history)
        assert discovery.branches["main"].base_commit is None
        assert discovery.branches["main"].base_branch is None

    def test_nested_branch_based_on_virtual_branch(self, nested_merges_history):
        discovery, _ = resolve(nested_merges_history)
        assert discovery.branches["f2"].base_commit == "f1"
        assert discovery.branches["f2"].base_branch == "f1"
        assert discovery.branches["f1"].base_branch == "main"

    def test_root_branch_without_base(self):
        """A branch with its own root commit has no base."""
        commits = [Commit(hash="o1"), Commit(hash="m1")]
        history = (commits, [Ref("main", "m1"), Ref("orphan", "o1")])
        discovery, _ = resolve(history)
        assert discovery.branches["orphan"].base_commit is None
        assert discovery.branches["orphan"].base_branch is None


class TestDetectMerges:
    """Test detect_merges."""

    def test_merged_ref_becomes_inactive(self, merged_feature_history):
        discovery, _ = resolve(merged_feature_history)
        feature = discovery.branches["feature"]
        assert feature.merged_at == "m2"
        assert feature.merged_into == "main"
        assert not feature.is_active
        assert feature.is_merged

    def test_open_branches_stay_active(self, open_branches_history):
        discovery, _ = resolve(open_branches_history)
        assert all(b.is_active for b in discovery.branches.values())

    def test_default_branch_never_marked_merged(self):
        """Merging main into a topic branch does not retire main."""
        commits = [
            Commit(hash="t2", parents=("t1", "m2"), message="Merge branch 'main' into topic"),
            Commit(hash="m2", parents=("m1",)),
            Commit(hash="t1", parents=("m1",)),
            Commit(hash="m1"),
        ]
        discovery, _ = resolve((commits, [Ref("main", "m2"), Ref("topic", "t2")]))
        assert discovery.branches["main"].is_active
        assert discovery.branches["main"].merged_at is None

    def test_newest_merge_wins(self):
        """A head merged twice is retired at the newer merge."""
        commits = [
            Commit(hash="m3", parents=("m2", "f1"), message="Merge branch 'feature' again"),
            Commit(hash="m2", parents=("m1", "f1"), message="Merge branch 'feature'"),
            Commit(hash="f1", parents=("m1",)),
            Commit(hash="m1"),
        ]
        discovery, _ = resolve((commits, [Ref("main", "m3"), Ref("feature", "f1")]))
        assert discovery.branches["feature"].merged_at == "m3"

    def test_virtual_branch_merged_into_owner_of_merge(self, nested_merges_history):
        discovery, _ = resolve(nested_merges_history)
        assert discovery.branches["f2"].merged_into == "f1"
        assert discovery.branches["f1"].merged_into == "main"


class TestTopologicalSortBranches:
    """Test topological_sort_branches."""

    def test_default_first_then_oldest(self, open_branches_history):
        _, order = resolve(open_branches_history)
        # b's commit is older than a's
        assert order == ["main", "b", "a"]

    def test_base_precedes_branch(self, nested_merges_history):
        discovery, order = resolve(nested_merges_history)
        assert order[0] == "main"
        for name in order:
            base = discovery.branches[name].base_branch
            if base is not None:
                assert order.index(base) < order.index(name)

    def test_every_branch_listed_once(self, sequential_merges_history):
        discovery, order = resolve(sequential_merges_history)
        assert sorted(order) == sorted(discovery.branches)
        assert order == ["main", "a", "b"]
