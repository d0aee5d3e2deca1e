"""Branch-first lane assignment.

Branches are laid out in base-first order. A branch takes the smallest free
lane to the right of its base branch's lane; lanes of merged branches go back
to a pool once the merge is laid out. A pooled lane is tagged with the row
of the merge that freed it and is only handed to a branch that lies entirely
above that row (newer than the merge), so two branches sharing a lane never
overlap in time.

Lane 0 belongs to the default branch and never enters the pool.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Optional

from ..config import LayoutConfig
from ..logging_config import get_logger
from .children import CommitIndex
from .discovery import Discovery
from .models import Branch

logger = get_logger(__name__)

MAINLINE_LANE = 0


@dataclass(order=True)
class FreedLane:
    lane: int
    freed_at_row: int


@dataclass
class LaneManager:
    """Active lanes, the sorted pool of freed lanes, and the branch -> lane map."""

    active: set[int] = field(default_factory=set)
    available: list[FreedLane] = field(default_factory=list)
    lanes: dict[str, int] = field(default_factory=dict)

    def allocate_mainline(self, name: str) -> int:
        self.active.add(MAINLINE_LANE)
        self.lanes[name] = MAINLINE_LANE
        return MAINLINE_LANE

    def allocate_lane(self, name: str, parent_lane: int, start_row: int) -> int:
        """Assign a lane to a branch whose oldest commit sits at start_row.

        Prefers the smallest pooled lane strictly right of parent_lane that
        was freed below start_row; otherwise opens a lane right of every
        lane in use or still pooled.
        """
        for i, freed in enumerate(self.available):
            if freed.lane > parent_lane and start_row < freed.freed_at_row:
                del self.available[i]
                lane = freed.lane
                break
        else:
            in_use = self.active | {freed.lane for freed in self.available}
            lane = max(max(in_use, default=MAINLINE_LANE), parent_lane) + 1

        self.active.add(lane)
        self.lanes[name] = lane
        return lane

    def free_lane(self, name: str, freed_at_row: int) -> Optional[int]:
        """Return a branch's lane to the pool. Lane 0 is never freed."""
        lane = self.lanes.get(name)
        if lane is None or lane == MAINLINE_LANE:
            return None
        self.active.discard(lane)
        bisect.insort(self.available, FreedLane(lane, freed_at_row))
        return lane

    @property
    def max_lane(self) -> int:
        return max(self.lanes.values(), default=MAINLINE_LANE)


def _start_row(branch: Branch, index: CommitIndex) -> int:
    return index.row[branch.created_at or branch.head]


def assign_lanes_to_branches(
    discovery: Discovery, branch_order: list[str], index: CommitIndex, config: LayoutConfig
) -> LaneManager:
    """Give every branch a lane and a colour, walking branch_order."""
    manager = LaneManager()
    branches = discovery.branches

    for name in branch_order:
        branch = branches[name]
        if name == discovery.default_branch:
            branch.lane = manager.allocate_mainline(name)
        else:
            parent_lane = MAINLINE_LANE
            if branch.base_branch is not None and branch.base_branch in manager.lanes:
                parent_lane = manager.lanes[branch.base_branch]
            branch.lane = manager.allocate_lane(name, parent_lane, _start_row(branch, index))
        branch.color = config.color_for_lane(branch.lane)

        if not branch.is_active and branch.merged_at is not None:
            manager.free_lane(name, index.row[branch.merged_at])

    logger.debug(
        "Assigned lanes to %d branches, max lane %d, %d lanes pooled",
        len(manager.lanes),
        manager.max_lane,
        len(manager.available),
    )
    return manager


def compact_lanes(branches: dict[str, Branch], config: LayoutConfig) -> dict[int, int]:
    """Renumber lanes by rank, removing gaps while keeping left-to-right order.

    Branches that shared a lane at different times keep sharing it.
    Returns the old -> new lane mapping.
    """
    used = sorted({b.lane for b in branches.values() if b.lane >= 0})
    mapping = {lane: rank for rank, lane in enumerate(used)}
    for branch in branches.values():
        if branch.lane >= 0:
            branch.lane = mapping[branch.lane]
            branch.color = config.color_for_lane(branch.lane)

    if used:
        logger.debug("Compacted %d lanes (max %d -> %d)", len(used), used[-1], len(used) - 1)
    return mapping
