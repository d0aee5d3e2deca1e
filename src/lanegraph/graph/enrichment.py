"""Commit enrichment and merge points, shared by both strategies.

A strategy reduces its result to one Placement (branch label + lane) per
commit and a resolver for merged parents; everything after that is common.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ..config import LayoutConfig
from .children import CommitIndex
from .discovery import Discovery
from .models import Commit, EnrichedCommit, MergePoint

# (merge commit, parent index) -> (merged branch name, source lane or None)
SourceResolver = Callable[[Commit, int], tuple[str, Optional[int]]]


@dataclass(frozen=True)
class Placement:
    branch: str
    lane: int


def resolve_primary_branch(
    commit_hash: str, discovery: Discovery, order_position: dict[str, int]
) -> Optional[str]:
    """Branch that decides a commit's lane and colour in the branch-first model.

    1. the branch the commit is exclusive to (by reachability or by claim)
    2. among all branches reaching it, the one with the smallest lane,
       ties broken by branch order
    None when no branch reaches the commit.
    """
    owner = discovery.owner.get(commit_hash)
    if owner is not None:
        return owner
    reaching = discovery.reaching(commit_hash)
    if not reaching:
        return None
    branches = discovery.branches
    return min(reaching, key=lambda n: (branches[n].lane, order_position.get(n, len(order_position))))


def place_commits_branch_first(
    index: CommitIndex, discovery: Discovery, branch_order: list[str]
) -> dict[str, Placement]:
    """Commits inherit the lane of their primary branch; unowned ones go to lane 0."""
    position = {name: i for i, name in enumerate(branch_order)}
    placements: dict[str, Placement] = {}
    for commit in index.ordered:
        primary = resolve_primary_branch(commit.hash, discovery, position)
        if primary is None:
            placements[commit.hash] = Placement(discovery.mainline, 0)
        else:
            placements[commit.hash] = Placement(primary, discovery.branches[primary].lane)
    return placements


def build_merge_points(
    index: CommitIndex, placements: dict[str, Placement], resolve_source: SourceResolver
) -> list[MergePoint]:
    """One MergePoint per non-first parent of every merge, in row order."""
    points: list[MergePoint] = []
    for commit in index.ordered:
        if not commit.is_merge:
            continue
        target = placements[commit.hash]
        for parent_index in range(1, len(commit.parents)):
            merged_branch, source_lane = resolve_source(commit, parent_index)
            points.append(
                MergePoint(
                    merge_commit=commit.hash,
                    merged_branch=merged_branch,
                    target_branch=target.branch,
                    source_lane=target.lane if source_lane is None else source_lane,
                    target_lane=target.lane,
                    parent=commit.parents[parent_index],
                )
            )
    return points


def enrich_commits(
    index: CommitIndex,
    discovery: Discovery,
    placements: dict[str, Placement],
    merge_points: list[MergePoint],
    branch_order: list[str],
    config: LayoutConfig,
) -> dict[str, EnrichedCommit]:
    """Freeze every commit's layout into an EnrichedCommit, in row order."""
    position = {name: i for i, name in enumerate(branch_order)}
    merged_by: dict[str, list[str]] = {}
    for point in merge_points:
        merged_by.setdefault(point.merge_commit, []).append(point.merged_branch)

    enriched: dict[str, EnrichedCommit] = {}
    for commit in index.ordered:
        placement = placements[commit.hash]
        belongs = sorted(
            discovery.reaching(commit.hash), key=lambda n: (position.get(n, len(position)), n)
        )
        enriched[commit.hash] = EnrichedCommit(
            commit=commit,
            belongs_to_branches=tuple(belongs),
            primary_branch=placement.branch,
            lane=placement.lane,
            color=config.color_for_lane(placement.lane),
            is_merge_commit=commit.is_merge,
            merged_branches=tuple(merged_by.get(commit.hash, ())),
        )
    return enriched
