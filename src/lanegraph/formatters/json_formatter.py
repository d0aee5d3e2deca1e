"""JSON formatter for lanegraph."""

import json
from typing import Any, Dict

from ..graph.models import Branch, BranchGraph, EnrichedCommit
from .base import BaseFormatter


def _branch_to_dict(branch: Branch) -> Dict[str, Any]:
    return {
        "name": branch.name,
        "ref": branch.ref,
        "head": branch.head,
        "base_commit": branch.base_commit,
        "base_branch": branch.base_branch,
        "created_at": branch.created_at,
        "merged_at": branch.merged_at,
        "merged_into": branch.merged_into,
        "is_active": branch.is_active,
        "is_virtual": branch.is_virtual,
        "lane": branch.lane,
        "color": branch.color,
        "child_branches": list(branch.child_branches),
        "exclusive_commits": sorted(branch.exclusive_commits),
        "all_commits": len(branch.all_commits),
    }


def _commit_to_dict(commit: EnrichedCommit) -> Dict[str, Any]:
    date = commit.commit.date
    return {
        "hash": commit.hash,
        "parents": list(commit.parents),
        "message": commit.message,
        "author": commit.commit.author,
        "date": date.isoformat() if date is not None else None,
        "refs": list(commit.commit.refs),
        "lane": commit.lane,
        "color": commit.color,
        "primary_branch": commit.primary_branch,
        "belongs_to_branches": list(commit.belongs_to_branches),
        "is_merge_commit": commit.is_merge_commit,
        "merged_branches": list(commit.merged_branches),
    }


def graph_to_dict(graph: BranchGraph) -> Dict[str, Any]:
    """Stable, JSON-ready view of a BranchGraph. Commits stay in display order."""
    return {
        "strategy": graph.strategy,
        "default_branch": graph.default_branch,
        "max_lane": graph.max_lane,
        "branch_order": list(graph.branch_order),
        "branches": [_branch_to_dict(graph.branches[name]) for name in graph.branch_order],
        "commits": [_commit_to_dict(c) for c in graph.commits.values()],
        "merge_points": [
            {
                "merge_commit": p.merge_commit,
                "parent": p.parent,
                "merged_branch": p.merged_branch,
                "target_branch": p.target_branch,
                "source_lane": p.source_lane,
                "target_lane": p.target_lane,
            }
            for p in graph.merge_points
        ],
    }


class JsonFormatter(BaseFormatter):
    """Render a branch graph as JSON."""

    def render(self, graph: BranchGraph) -> None:
        print(self.format(graph))

    def format(self, graph: BranchGraph) -> str:
        return json.dumps(graph_to_dict(graph), indent=2)
