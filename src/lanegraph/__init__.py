"""
lanegraph - Commit Graph Lane Layout

Turns a commit history (commits with parent pointers, plus branch refs) into
a deterministic picture: a lane and colour per commit, a branch lineage model
including branches reconstructed from merge commits, and one connector per
merged parent.
"""

__version__ = "0.1.0"

from .config import LayoutConfig, load_config
from .exceptions import LaneGraphError
from .graph import (
    Branch,
    BranchGraph,
    Commit,
    EnrichedCommit,
    MergePoint,
    Ref,
    RefKind,
    build_branch_graph,
)

__all__ = [
    "build_branch_graph",  # Main entry point
    "Commit",
    "Ref",
    "RefKind",
    "BranchGraph",
    "Branch",
    "EnrichedCommit",
    "MergePoint",
    "LayoutConfig",
    "load_config",
    "LaneGraphError",
]
