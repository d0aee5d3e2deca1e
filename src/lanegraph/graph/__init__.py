"""Commit-graph layout engine: pure functions from (commits, refs) to BranchGraph."""

from .builder import build_branch_graph
from .models import (
    Branch,
    BranchGraph,
    ChildKind,
    ChildLink,
    Commit,
    CommitWithChildren,
    EnrichedCommit,
    MergePoint,
    Ref,
    RefKind,
)
from .strategies import STRATEGIES, BranchFirstStrategy, LayoutStrategy, RowByRowStrategy, get_strategy

__all__ = [
    "build_branch_graph",
    "Branch",
    "BranchGraph",
    "ChildKind",
    "ChildLink",
    "Commit",
    "CommitWithChildren",
    "EnrichedCommit",
    "MergePoint",
    "Ref",
    "RefKind",
    "STRATEGIES",
    "LayoutStrategy",
    "BranchFirstStrategy",
    "RowByRowStrategy",
    "get_strategy",
]
