"""Tests for branch-first lane assignment, reclamation and compaction."""

from lanegraph.config import LayoutConfig
from lanegraph.graph.children import CommitIndex
from lanegraph.graph.discovery import discover_branches
from lanegraph.graph.lanes import (
    FreedLane,
    LaneManager,
    assign_lanes_to_branches,
    compact_lanes,
)
from lanegraph.graph.lineage import detect_merges, find_branch_bases, topological_sort_branches
from lanegraph.graph.models import Branch
from lanegraph.graph.ordering import order_newest_first


def assign(history, config=None):
    config = config or LayoutConfig()
    commits, refs = history
    index = CommitIndex(order_newest_first(commits))
    discovery = discover_branches(refs, index, config)
    find_branch_bases(discovery, index)
    detect_merges(discovery, index)
    order = topological_sort_branches(discovery, index)
    manager = assign_lanes_to_branches(discovery, order, index, config)
    return discovery.branches, manager


class TestLaneManager:
    """Test LaneManager allocation rules."""

    def test_mainline_is_lane_zero(self):
        manager = LaneManager()
        assert manager.allocate_mainline("main") == 0

    def test_new_lane_right_of_everything(self):
        manager = LaneManager()
        manager.allocate_mainline("main")
        assert manager.allocate_lane("a", parent_lane=0, start_row=5) == 1
        assert manager.allocate_lane("b", parent_lane=0, start_row=5) == 2
        assert manager.allocate_lane("c", parent_lane=2, start_row=5) == 3

    def test_freed_lane_reused_by_newer_branch(self):
        manager = LaneManager()
        manager.allocate_mainline("main")
        manager.allocate_lane("a", parent_lane=0, start_row=10)
        manager.free_lane("a", freed_at_row=8)
        assert manager.allocate_lane("b", parent_lane=0, start_row=3) == 1
        assert manager.available == []

    def test_freed_lane_not_reused_by_overlapping_branch(self):
        """A branch alive before the merge cannot take the merged lane."""
        manager = LaneManager()
        manager.allocate_mainline("main")
        manager.allocate_lane("a", parent_lane=0, start_row=10)
        manager.free_lane("a", freed_at_row=8)
        assert manager.allocate_lane("b", parent_lane=0, start_row=9) == 2
        assert manager.available == [FreedLane(1, 8)]

    def test_pooled_lane_must_be_right_of_parent(self):
        manager = LaneManager()
        manager.allocate_mainline("main")
        manager.allocate_lane("a", parent_lane=0, start_row=10)
        manager.allocate_lane("b", parent_lane=0, start_row=10)
        manager.free_lane("a", freed_at_row=8)
        assert manager.allocate_lane("c", parent_lane=2, start_row=1) == 3

    def test_smallest_eligible_lane_first(self):
        manager = LaneManager()
        manager.allocate_mainline("main")
        for name in ("a", "b", "c"):
            manager.allocate_lane(name, parent_lane=0, start_row=20)
        manager.free_lane("c", freed_at_row=10)
        manager.free_lane("a", freed_at_row=10)
        assert [f.lane for f in manager.available] == [1, 3]
        assert manager.allocate_lane("d", parent_lane=0, start_row=2) == 1

    def test_lane_zero_never_freed(self):
        manager = LaneManager()
        manager.allocate_mainline("main")
        assert manager.free_lane("main", freed_at_row=0) is None
        assert 0 in manager.active
        assert manager.available == []


class TestAssignLanesToBranches:
    """Test assign_lanes_to_branches on reference histories."""

    def test_merged_feature(self, merged_feature_history):
        branches, manager = assign(merged_feature_history)
        assert branches["main"].lane == 0
        assert branches["feature"].lane == 1
        # lane 1 is pooled again, tagged with m2's row
        assert manager.available == [FreedLane(1, 0)]

    def test_open_branches_get_distinct_lanes(self, open_branches_history):
        branches, manager = assign(open_branches_history)
        assert branches["main"].lane == 0
        assert {branches["a"].lane, branches["b"].lane} == {1, 2}
        assert manager.available == []

    def test_lane_reuse_after_merge(self, sequential_merges_history):
        branches, _ = assign(sequential_merges_history)
        assert branches["a"].lane == 1
        assert branches["b"].lane == 1

    def test_nested_branch_right_of_its_base(self, nested_merges_history):
        branches, _ = assign(nested_merges_history)
        assert branches["f1"].lane == 1
        assert branches["f2"].lane == 2

    def test_colors_follow_palette(self, open_branches_history):
        config = LayoutConfig(palette=("red", "green"))
        branches, _ = assign(open_branches_history, config)
        for branch in branches.values():
            assert branch.color == ("red", "green")[branch.lane % 2]


class TestCompactLanes:
    """Test compact_lanes."""

    def test_gaps_removed_order_kept(self):
        branches = {
            "main": Branch(name="main", head="m", lane=0),
            "a": Branch(name="a", head="a", lane=3),
            "b": Branch(name="b", head="b", lane=7),
            "c": Branch(name="c", head="c", lane=3),
        }
        mapping = compact_lanes(branches, LayoutConfig())
        assert mapping == {0: 0, 3: 1, 7: 2}
        assert [branches[n].lane for n in ("main", "a", "b", "c")] == [0, 1, 2, 1]
        assert branches["b"].color == LayoutConfig().palette[2]

    def test_contiguous_lanes_unchanged(self):
        branches = {
            "main": Branch(name="main", head="m", lane=0),
            "a": Branch(name="a", head="a", lane=1),
        }
        assert compact_lanes(branches, LayoutConfig()) == {0: 0, 1: 1}
