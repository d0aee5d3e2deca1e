"""Child relations: invert parent pointers into tagged child links.

Git stores only parents. Both lane strategies need children, split into
branch children (this commit is their first parent) and merge children
(this commit is one of their later parents).
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..logging_config import get_logger
from .models import ChildKind, ChildLink, Commit, CommitWithChildren

logger = get_logger(__name__)


def build_child_relations(commits: Iterable[Commit]) -> dict[str, CommitWithChildren]:
    """Build hash -> CommitWithChildren for every commit.

    A parent hash outside the commit set (truncated history) gets no entry;
    the edge is simply dropped.
    """
    commits = list(commits)
    relations: dict[str, CommitWithChildren] = {c.hash: CommitWithChildren(commit=c) for c in commits}

    dangling = 0
    for commit in commits:
        for index, parent_hash in enumerate(commit.parents):
            parent = relations.get(parent_hash)
            if parent is None:
                dangling += 1
                continue
            kind = ChildKind.BRANCH if index == 0 else ChildKind.MERGE
            parent.links.append(ChildLink(kind=kind, target=commit.hash))

    if dangling:
        logger.debug("%d parent edges point outside the history and were dropped", dangling)
    logger.debug("Built child relations for %d commits", len(relations))

    return relations


class CommitIndex:
    """Row-ordered commit set with child relations, shared by every layout phase.

    Membership checks against this index are how truncated history is
    tolerated: parent hashes outside it are never followed.
    """

    def __init__(self, ordered: Sequence[Commit]):
        self.ordered: list[Commit] = list(ordered)
        self.relations = build_child_relations(self.ordered)
        self.row: dict[str, int] = {c.hash: i for i, c in enumerate(self.ordered)}

    def __len__(self) -> int:
        return len(self.ordered)

    def __contains__(self, commit_hash: object) -> bool:
        return commit_hash in self.relations

    def get(self, commit_hash: str) -> Commit:
        return self.relations[commit_hash].commit

    def parents(self, commit_hash: str) -> list[str]:
        """Parents present in the index, in parent order."""
        return [p for p in self.relations[commit_hash].commit.parents if p in self.relations]

    def first_parent(self, commit_hash: str) -> Optional[str]:
        parent = self.relations[commit_hash].commit.first_parent
        return parent if parent in self.relations else None

    def merges_oldest_first(self) -> list[Commit]:
        return [c for c in reversed(self.ordered) if c.is_merge]
