"""Row-by-row lane assignment: the commit is the unit of layout.

One pass over the rows, newest first, with an array of lane slots. A slot
holds the hash of the commit whose line currently runs through it, or None
when free. Slots are reset to None, never removed, so lane numbers stay
stable for the whole pass.

When the history has a default branch, slot 0 is reserved for its
first-parent line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..logging_config import get_logger
from .algorithms import first_parent_chain
from .children import CommitIndex
from .discovery import Discovery, virtual_branch_name

logger = get_logger(__name__)


@dataclass
class RowLayout:
    lanes: dict[str, int] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    max_lane: int = 0


class LaneSlots:
    """Lane slots of the row-by-row pass."""

    def __init__(self, reserve_mainline: bool):
        self.slots: list[Optional[str]] = [None]
        self.reserve_mainline = reserve_mainline

    def _usable(self, lane: int) -> bool:
        return self.slots[lane] is None and not (self.reserve_mainline and lane == 0)

    def first_free(self) -> int:
        for lane in range(len(self.slots)):
            if self._usable(lane):
                return lane
        return self.append()

    def nearest_free(self, start: int) -> int:
        """Free slot nearest to start: start itself, then leftwards, then rightwards."""
        start = min(start, len(self.slots) - 1)
        for lane in range(start, -1, -1):
            if self._usable(lane):
                return lane
        for lane in range(start + 1, len(self.slots)):
            if self._usable(lane):
                return lane
        return self.append()

    def append(self) -> int:
        self.slots.append(None)
        return len(self.slots) - 1

    def occupy(self, lane: int, commit_hash: str) -> None:
        while lane >= len(self.slots):
            self.slots.append(None)
        self.slots[lane] = commit_hash

    def release(self, lane: int, holder: str) -> bool:
        """Free a slot if holder still occupies it. Reserved lane 0 stays."""
        if self.reserve_mainline and lane == 0:
            return False
        if lane < len(self.slots) and self.slots[lane] == holder:
            self.slots[lane] = None
            return True
        return False


def assign_lanes_row_by_row(index: CommitIndex, discovery: Discovery) -> RowLayout:
    """Assign a lane to every commit in row order.

    Per commit:
      - on the default branch's first-parent line: lane 0
      - with branch children: the leftmost branch child's lane
      - with only merge children: the free slot nearest the leftmost merge
        child's lane, left before right
      - a head: the first free slot
    Branch children that did not hand over their lane end here and release
    it. A commit without parents in the history releases its own slot.
    """
    default = discovery.default_branch
    mainline: set[str] = set()
    if default is not None:
        head = discovery.branches[default].head
        mainline = set(first_parent_chain(head, index.first_parent, index.__contains__))

    slots = LaneSlots(reserve_mainline=default is not None)
    layout = RowLayout()
    lanes = layout.lanes

    for commit in index.ordered:
        relation = index.relations[commit.hash]
        branch_children = relation.branch_children
        merge_children = relation.merge_children

        if commit.hash in mainline:
            lane = 0
        elif branch_children:
            lane = min(lanes[child] for child in branch_children)
        elif merge_children:
            lane = slots.nearest_free(min(lanes[child] for child in merge_children))
        else:
            lane = slots.first_free()

        lanes[commit.hash] = lane
        slots.occupy(lane, commit.hash)

        for child in branch_children:
            if lanes[child] != lane:
                slots.release(lanes[child], child)
        for child in merge_children:
            # a merge child whose own first parent is in the history keeps its
            # lane until that parent takes it over
            if lanes[child] != lane and index.first_parent(child) is None:
                slots.release(lanes[child], child)
        if not index.parents(commit.hash):
            slots.release(lane, commit.hash)

    layout.labels = label_commits(index, discovery, lanes)
    layout.max_lane = max(lanes.values(), default=0)
    logger.debug("Row-by-row layout used %d lanes for %d commits", len(slots.slots), len(lanes))
    return layout


def label_commits(index: CommitIndex, discovery: Discovery, lanes: dict[str, int]) -> dict[str, str]:
    """Branch label of every commit, inherited downwards from the nearest head.

    A commit is labelled with a branch whose head it is (default branch
    first, then by name), else with the label of its branch child on the
    same lane, else with the name its merge child's message gives it, else
    with the mainline name.
    """
    heads: dict[str, list[str]] = {}
    for name in sorted(discovery.branches, key=lambda n: (n != discovery.default_branch, n)):
        heads.setdefault(discovery.branches[name].head, []).append(name)

    labels: dict[str, str] = {}
    for commit in index.ordered:
        relation = index.relations[commit.hash]
        if commit.hash in heads:
            labels[commit.hash] = heads[commit.hash][0]
            continue
        same_lane = [c for c in relation.branch_children if lanes[c] == lanes[commit.hash]]
        if same_lane:
            labels[commit.hash] = labels[same_lane[0]]
            continue
        if relation.merge_children:
            merge = index.get(min(relation.merge_children, key=index.row.__getitem__))
            parent_index = merge.parents.index(commit.hash, 1)
            labels[commit.hash] = virtual_branch_name(merge, parent_index)
            continue
        labels[commit.hash] = discovery.mainline
    return labels
