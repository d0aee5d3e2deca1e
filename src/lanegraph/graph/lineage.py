"""Branch lineage: bases, merge status and base-first branch order."""

from __future__ import annotations

from typing import Optional

from ..logging_config import get_logger
from .children import CommitIndex
from .discovery import Discovery

logger = get_logger(__name__)


def _preferred(names: set[str], default_branch: Optional[str]) -> Optional[str]:
    """Default branch if present, else the first name alphabetically."""
    if not names:
        return None
    if default_branch in names:
        return default_branch
    return min(names)


def find_branch_bases(discovery: Discovery, index: CommitIndex) -> None:
    """Resolve base_commit/base_branch for every non-default branch.

    The base commit is the first parent of the branch's oldest exclusive
    commit; the base branch is whoever owns that commit.
    """
    branches = discovery.branches
    for name, branch in branches.items():
        if name == discovery.default_branch or branch.base_commit is not None:
            continue
        if branch.created_at is None:
            continue
        base_commit = index.first_parent(branch.created_at)
        if base_commit is None:
            continue

        branch.base_commit = base_commit
        base_branch = discovery.owner.get(base_commit)
        if base_branch is None or base_branch == name:
            base_branch = _preferred(discovery.reaching(base_commit) - {name}, discovery.default_branch)
        branch.base_branch = base_branch
        if base_branch is not None:
            branches[base_branch].child_branches.append(name)


def detect_merges(discovery: Discovery, index: CommitIndex) -> int:
    """Mark branches whose head was merged into another line.

    A branch is merged at the newest merge commit that has its head as a
    non-first parent; it stops being active there. The default branch is
    never marked merged, even when merged into a topic branch.
    """
    heads: dict[str, list[str]] = {}
    for name, branch in discovery.branches.items():
        if name != discovery.default_branch:
            heads.setdefault(branch.head, []).append(name)

    merged = 0
    for merge in index.merges_oldest_first():
        for merged_parent in merge.parents[1:]:
            for name in heads.get(merged_parent, ()):
                branch = discovery.branches[name]
                target = discovery.owner.get(merge.hash)
                if target is None or target == name:
                    target = _preferred(discovery.reaching(merge.hash) - {name}, discovery.default_branch)
                if branch.merged_at is None:
                    merged += 1
                # oldest first, so the newest merge is the last write
                branch.merged_at = merge.hash
                branch.merged_into = target
                branch.is_active = False
    return merged


def topological_sort_branches(discovery: Discovery, index: CommitIndex) -> list[str]:
    """Order branches so that a base always precedes the branches forked from it.

    The default branch comes first; the rest are visited oldest first (by
    the row of their oldest commit), ties broken by name.
    """
    branches = discovery.branches

    def age(name: str) -> tuple[int, str]:
        branch = branches[name]
        start = branch.created_at or branch.head
        return (-index.row[start], name)

    roots = sorted(branches, key=age)
    if discovery.default_branch is not None:
        roots.sort(key=lambda n: n != discovery.default_branch)

    order: list[str] = []
    visited: set[str] = set()
    for root in roots:
        path: list[str] = []
        on_path: set[str] = set()
        current: Optional[str] = root
        while current is not None and current in branches:
            if current in visited or current in on_path:
                break
            path.append(current)
            on_path.add(current)
            current = branches[current].base_branch
        for name in reversed(path):
            visited.add(name)
            order.append(name)

    logger.debug("Topologically sorted %d branches", len(order))
    return order
