"""Layout strategies: branch-first and row-by-row.

Both take the same CommitIndex and refs and return a BranchGraph. They
share branch discovery, lineage, enrichment and merge points; they differ
in what carries a lane (a branch, or each commit).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ..config import LayoutConfig
from ..exceptions import UnknownStrategyError
from ..logging_config import get_logger
from .children import CommitIndex
from .discovery import Discovery, discover_branches, virtual_branch_name
from .enrichment import (
    Placement,
    build_merge_points,
    enrich_commits,
    place_commits_branch_first,
)
from .lanes import assign_lanes_to_branches, compact_lanes
from .lineage import detect_merges, find_branch_bases, topological_sort_branches
from .models import BranchGraph, Commit, Ref
from .row_by_row import assign_lanes_row_by_row

logger = get_logger(__name__)


class LayoutStrategy(ABC):
    """commits x refs -> BranchGraph."""

    name: str = ""
    refine_ownership: bool = True

    def layout(self, index: CommitIndex, refs: Iterable[Ref], config: LayoutConfig) -> BranchGraph:
        discovery = discover_branches(refs, index, config, refine=self.refine_ownership)
        find_branch_bases(discovery, index)
        merged = detect_merges(discovery, index)
        branch_order = topological_sort_branches(discovery, index)
        logger.debug("Lineage resolved: %d branches merged", merged)

        placements, resolve_source = self.place(index, discovery, branch_order, config)
        merge_points = build_merge_points(index, placements, resolve_source)
        commits = enrich_commits(index, discovery, placements, merge_points, branch_order, config)
        logger.debug("Computed %d merge points", len(merge_points))

        return BranchGraph(
            branches=discovery.branches,
            commits=commits,
            commit_to_branches={h: frozenset(names) for h, names in discovery.commit_to_branches.items()},
            branch_order=branch_order,
            merge_points=merge_points,
            strategy=self.name,
            default_branch=discovery.default_branch,
        )

    @abstractmethod
    def place(self, index: CommitIndex, discovery: Discovery, branch_order: list[str], config: LayoutConfig):
        """Return (placements, merged-parent resolver) for enrichment."""


class BranchFirstStrategy(LayoutStrategy):
    """The branch is the unit of layout; commits inherit their primary branch's lane."""

    name = "branch-first"
    refine_ownership = True

    def place(self, index, discovery, branch_order, config):
        assign_lanes_to_branches(discovery, branch_order, index, config)
        if config.compact_lanes:
            compact_lanes(discovery.branches, config)
        placements = place_commits_branch_first(index, discovery, branch_order)
        branches = discovery.branches

        def resolve_source(merge: Commit, parent_index: int):
            parent = merge.parents[parent_index]
            name = discovery.merge_owner.get((merge.hash, parent_index))
            if name is None:
                if parent not in index:
                    return virtual_branch_name(merge, parent_index), None
                name = placements[parent].branch
            if name in branches:
                return name, branches[name].lane
            return name, None

        return placements, resolve_source


class RowByRowStrategy(LayoutStrategy):
    """The commit is the unit of layout; branch names only label lanes."""

    name = "row-by-row"
    refine_ownership = False

    def place(self, index, discovery, branch_order, config):
        layout = assign_lanes_row_by_row(index, discovery)
        placements = {
            h: Placement(layout.labels[h], lane) for h, lane in layout.lanes.items()
        }
        for branch in discovery.branches.values():
            branch.lane = layout.lanes[branch.head]
            branch.color = config.color_for_lane(branch.lane)

        def resolve_source(merge: Commit, parent_index: int):
            parent = merge.parents[parent_index]
            if parent not in index:
                return virtual_branch_name(merge, parent_index), None
            return layout.labels[parent], layout.lanes[parent]

        return placements, resolve_source


STRATEGIES: dict[str, type[LayoutStrategy]] = {
    BranchFirstStrategy.name: BranchFirstStrategy,
    RowByRowStrategy.name: RowByRowStrategy,
}


def get_strategy(name: str) -> LayoutStrategy:
    """Instantiate a strategy by name.

    Raises:
        UnknownStrategyError: If no strategy has that name.
    """
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise UnknownStrategyError(name, STRATEGIES) from None
