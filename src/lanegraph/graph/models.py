"""Data models for commit-graph layout.

Levels:
  Input:   Commit, Ref (immutable, caller supplied)
  Derived: CommitWithChildren, Branch (working structures of one invocation)
  Output:  EnrichedCommit, MergePoint, BranchGraph

Cross references are always by identifier (commit hash, branch name) into an
owning mapping, never by object aliasing, so lane passes can rewrite lanes
without disturbing identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

# ── Input ──────────────────────────────────────────────────────────


class RefKind(str, Enum):
    """Kind of a named reference. Only BRANCH participates in layout."""

    BRANCH = "branch"
    TAG = "tag"
    REMOTE = "remote"
    OTHER = "other"


@dataclass(frozen=True)
class Commit:
    """A commit as emitted by a log query."""

    hash: str
    parents: tuple[str, ...] = ()  # parents[0] is the mainline parent
    message: str = ""
    author: str = ""
    date: Optional[datetime] = None
    refs: tuple[str, ...] = ()  # decorations pointing at this commit

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def first_parent(self) -> Optional[str]:
        return self.parents[0] if self.parents else None

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass(frozen=True)
class Ref:
    """A named reference (branch, tag, remote-tracking branch)."""

    name: str
    hash: str
    kind: RefKind = RefKind.BRANCH
    ref: str = ""  # full ref name, e.g. refs/heads/main


# ── Derived ────────────────────────────────────────────────────────


class ChildKind(Enum):
    """How a child reaches its parent."""

    BRANCH = "branch"  # parent at index 0: mainline continuation
    MERGE = "merge"  # parent at index >= 1: incorporated via merge


@dataclass(frozen=True)
class ChildLink:
    kind: ChildKind
    target: str  # hash of the child commit


@dataclass
class CommitWithChildren:
    """A commit plus the inverted parent relation."""

    commit: Commit
    links: list[ChildLink] = field(default_factory=list)

    @property
    def hash(self) -> str:
        return self.commit.hash

    @property
    def children(self) -> list[str]:
        return [link.target for link in self.links]

    @property
    def branch_children(self) -> list[str]:
        return [link.target for link in self.links if link.kind is ChildKind.BRANCH]

    @property
    def merge_children(self) -> list[str]:
        return [link.target for link in self.links if link.kind is ChildKind.MERGE]

    @property
    def has_branch_children(self) -> bool:
        return any(link.kind is ChildKind.BRANCH for link in self.links)

    @property
    def has_only_merge_children(self) -> bool:
        """Tip of a branch that was merged and not continued."""
        return bool(self.links) and not self.has_branch_children

    @property
    def is_branch_head(self) -> bool:
        """Nothing continues this commit."""
        return not self.links


@dataclass
class Branch:
    """A branch entity: real (from a ref) or virtual (reconstructed from a merge)."""

    name: str
    head: str
    ref: str = ""
    base_commit: Optional[str] = None
    base_branch: Optional[str] = None
    exclusive_commits: set[str] = field(default_factory=set)
    all_commits: set[str] = field(default_factory=set)
    created_at: Optional[str] = None  # oldest exclusive commit
    merged_at: Optional[str] = None  # merge commit that incorporated the head
    merged_into: Optional[str] = None
    is_active: bool = True
    is_virtual: bool = False
    lane: int = -1  # -1 = not yet assigned
    color: str = ""
    child_branches: list[str] = field(default_factory=list)

    @property
    def is_merged(self) -> bool:
        return self.merged_at is not None


# ── Output ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EnrichedCommit:
    """Immutable per-commit layout snapshot."""

    commit: Commit
    belongs_to_branches: tuple[str, ...]
    primary_branch: str
    lane: int
    color: str
    is_merge_commit: bool
    merged_branches: tuple[str, ...] = ()

    @property
    def hash(self) -> str:
        return self.commit.hash

    @property
    def parents(self) -> tuple[str, ...]:
        return self.commit.parents

    @property
    def message(self) -> str:
        return self.commit.message


@dataclass(frozen=True)
class MergePoint:
    """Connector for one merged-in parent of a merge commit."""

    merge_commit: str
    merged_branch: str
    target_branch: str
    source_lane: int
    target_lane: int
    parent: str = ""  # the merged parent hash this connector starts from


@dataclass
class BranchGraph:
    """Complete layout result. Built once per invocation, not patched afterwards."""

    branches: dict[str, Branch] = field(default_factory=dict)
    commits: dict[str, EnrichedCommit] = field(default_factory=dict)  # display order
    commit_to_branches: dict[str, frozenset[str]] = field(default_factory=dict)
    branch_order: list[str] = field(default_factory=list)
    merge_points: list[MergePoint] = field(default_factory=list)
    strategy: str = ""
    default_branch: Optional[str] = None

    @property
    def max_lane(self) -> int:
        return max((c.lane for c in self.commits.values()), default=0)

    def lane_of(self, commit_hash: str) -> int:
        return self.commits[commit_hash].lane
