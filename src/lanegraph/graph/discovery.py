"""Branch discovery: branches from refs, reachability, ownership, virtual branches.

Phases, in the order the builder runs them:
  1. extract_branches: one Branch per branch ref (last write wins)
  2. build_commit_to_branch_mapping: reverse BFS from every head
  3. identify_exclusive_commits: commits reached by exactly one branch
  4. claim_first_parent_chains: each branch claims its own first-parent line
  5. create_virtual_branches_for_merges: each merged segment gets an owner,
     synthesizing a branch when no ref names it
  6. finalize_ownership: claims override reachability, exclusive sets rebuilt

Phases 4-6 only run for the branch-first strategy; row-by-row keeps plain
reachability ownership.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..config import LayoutConfig
from ..logging_config import get_logger
from .algorithms import first_parent_chain, merged_segment, reachable_from
from .children import CommitIndex
from .models import Branch, Commit, Ref, RefKind

logger = get_logger(__name__)

# Tried in order; the first match names the merged branch.
_PULL_REQUEST_RE = re.compile(r"Merge pull request #(\d+) from (.+)")
_REMOTE_BRANCH_RE = re.compile(r"Merge remote-tracking branch '([^']+)'")
_LOCAL_BRANCH_RE = re.compile(r"Merge branch '([^']+)'")


@dataclass
class Discovery:
    """Branch model shared by lineage, lane assignment and enrichment."""

    branches: dict[str, Branch]
    commit_to_branches: dict[str, set[str]]
    owner: dict[str, str]  # commit hash -> the one branch it is exclusive to
    default_branch: Optional[str]
    mainline: str
    merge_owner: dict[tuple[str, int], str] = field(default_factory=dict)
    first_parent_chains: dict[str, set[str]] = field(default_factory=dict)

    def reaching(self, commit_hash: str) -> set[str]:
        return self.commit_to_branches.get(commit_hash, set())


def extract_branches(refs: Iterable[Ref], index: CommitIndex) -> dict[str, Branch]:
    """One Branch per branch-kind ref. Later refs with the same name win."""
    branches: dict[str, Branch] = {}
    ignored = 0
    for ref in refs:
        if ref.kind is not RefKind.BRANCH:
            ignored += 1
            continue
        if ref.hash not in index:
            logger.debug("Branch %s points outside the history; skipped", ref.name)
            branches.pop(ref.name, None)
            continue
        branches[ref.name] = Branch(
            name=ref.name, head=ref.hash, ref=ref.ref or f"refs/heads/{ref.name}"
        )
    if ignored:
        logger.debug("Ignored %d non-branch refs", ignored)
    return branches


def build_commit_to_branch_mapping(
    branches: dict[str, Branch], index: CommitIndex
) -> dict[str, set[str]]:
    """Fill Branch.all_commits and return hash -> names of branches reaching it."""
    commit_to_branches: dict[str, set[str]] = {}
    for name, branch in branches.items():
        reached = reachable_from(branch.head, index.parents, index.__contains__)
        branch.all_commits = set(reached)
        for commit_hash in reached:
            commit_to_branches.setdefault(commit_hash, set()).add(name)
    return commit_to_branches


def choose_default_branch(branches: dict[str, Branch], config: LayoutConfig) -> Optional[str]:
    """The mainline: configured name, then a conventional name, then the widest branch."""
    if not branches:
        return None
    if config.default_branch and config.default_branch in branches:
        return config.default_branch
    for candidate in config.mainline_candidates:
        if candidate in branches:
            return candidate
    return min(branches.values(), key=lambda b: (-len(b.all_commits), b.name)).name


def identify_exclusive_commits(
    branches: dict[str, Branch], commit_to_branches: dict[str, set[str]], index: CommitIndex
) -> dict[str, str]:
    """Mark commits reached by exactly one branch; return hash -> that branch."""
    owner = {h: next(iter(names)) for h, names in commit_to_branches.items() if len(names) == 1}
    _apply_ownership(branches, owner, index)
    return owner


def _apply_ownership(branches: dict[str, Branch], owner: dict[str, str], index: CommitIndex) -> None:
    for branch in branches.values():
        branch.exclusive_commits = set()
    for commit_hash, name in owner.items():
        branches[name].exclusive_commits.add(commit_hash)
    for branch in branches.values():
        # created_at is the oldest exclusive commit, i.e. the highest row
        branch.created_at = max(branch.exclusive_commits, key=index.row.__getitem__, default=None)


def claim_first_parent_chains(
    branches: dict[str, Branch], index: CommitIndex, default_branch: Optional[str]
) -> tuple[dict[str, str], dict[str, set[str]]]:
    """Each branch claims its first-parent line down to an already claimed commit.

    The default branch goes first and claims its whole line; the others follow
    oldest head first, so a branch forked from another stops at the fork.

    Returns (claims, chains): hash -> claiming branch, and each branch's full
    first-parent line.
    """
    claims: dict[str, str] = {}
    chains: dict[str, set[str]] = {}

    def head_age(branch: Branch) -> tuple[int, str]:
        return (-index.row[branch.head], branch.name)

    ordered = sorted(branches.values(), key=head_age)
    if default_branch is not None:
        ordered.sort(key=lambda b: b.name != default_branch)

    for branch in ordered:
        chain = first_parent_chain(branch.head, index.first_parent, index.__contains__)
        chains[branch.name] = set(chain)
        for commit_hash in chain:
            if commit_hash in claims:
                break
            claims[commit_hash] = branch.name
    return claims, chains


def extract_branch_name_from_merge_message(message: str) -> Optional[str]:
    """Best-effort name of the branch a merge commit brought in."""
    match = _PULL_REQUEST_RE.search(message)
    if match:
        return match.group(2).strip() or f"PR #{match.group(1)}"

    for pattern in (_REMOTE_BRANCH_RE, _LOCAL_BRANCH_RE):
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


def synthetic_branch_name(merge: Commit, parent_index: int) -> str:
    """Fallback name for the branch merged at parents[parent_index]."""
    return f"merged-{merge.short_hash}-{parent_index - 1}"


def virtual_branch_name(merge: Commit, parent_index: int, taken: Iterable[str] = ()) -> str:
    name = extract_branch_name_from_merge_message(merge.message)
    if name is None:
        logger.debug("No branch name in merge message of %s", merge.short_hash)
        return synthetic_branch_name(merge, parent_index)
    if name in set(taken):
        return synthetic_branch_name(merge, parent_index)
    return name


def _segment_owner(
    merged_parent: str,
    merge_hash: str,
    real: list[Branch],
    chains: dict[str, set[str]],
) -> Optional[str]:
    for branch in real:
        if branch.head == merged_parent:
            return branch.name
    for branch in real:
        chain = chains.get(branch.name, set())
        if merge_hash not in chain and merged_parent in chain:
            return branch.name
    return None


def create_virtual_branches_for_merges(
    discovery: Discovery, index: CommitIndex, claims: dict[str, str]
) -> int:
    """Give every merged segment an owner, oldest merge first.

    The merged segment of parents[i] is what the merge brought in: commits
    reachable from parents[i] but not from parents[0]. Its owner is the real
    branch whose head is parents[i], else a real branch whose first-parent
    line runs through it, else a new virtual branch. Segment commits nobody
    claimed yet are claimed by the owner.

    Returns the number of virtual branches created.
    """
    branches = discovery.branches
    real = sorted(branches.values(), key=lambda b: (b.name != discovery.default_branch, b.name))
    created = 0

    for merge in index.merges_oldest_first():
        for parent_index, merged_parent in enumerate(merge.parents[1:], start=1):
            if merged_parent not in index:
                continue
            segment = merged_segment(
                merged_parent, index.first_parent(merge.hash), index.parents, index.row
            )
            if not segment:
                continue

            name = _segment_owner(merged_parent, merge.hash, real, discovery.first_parent_chains)
            if name is None:
                name = virtual_branch_name(merge, parent_index, branches)
                branches[name] = Branch(
                    name=name,
                    head=merged_parent,
                    ref=f"virtual/{name}",
                    all_commits=set(segment),
                    merged_at=merge.hash,
                    is_active=False,
                    is_virtual=True,
                )
                for commit_hash in segment:
                    discovery.commit_to_branches.setdefault(commit_hash, set()).add(name)
                created += 1

            for commit_hash in segment:
                claims.setdefault(commit_hash, name)
            discovery.merge_owner[(merge.hash, parent_index)] = name

    return created


def discover_branches(
    refs: Iterable[Ref], index: CommitIndex, config: LayoutConfig, refine: bool = True
) -> Discovery:
    """Run the discovery phases and return the shared branch model."""
    branches = extract_branches(refs, index)
    commit_to_branches = build_commit_to_branch_mapping(branches, index)
    default_branch = choose_default_branch(branches, config)
    owner = identify_exclusive_commits(branches, commit_to_branches, index)
    discovery = Discovery(
        branches=branches,
        commit_to_branches=commit_to_branches,
        owner=owner,
        default_branch=default_branch,
        mainline=default_branch or config.mainline_name,
    )
    logger.debug(
        "Discovered %d branches (default: %s), %d exclusive commits",
        len(branches),
        default_branch,
        len(owner),
    )
    if not refine:
        return discovery

    claims, discovery.first_parent_chains = claim_first_parent_chains(branches, index, default_branch)
    created = create_virtual_branches_for_merges(discovery, index, claims)
    finalize_ownership(discovery, claims, index)
    logger.debug("Created %d virtual branches; %d commits claimed", created, len(claims))
    return discovery


def finalize_ownership(discovery: Discovery, claims: dict[str, str], index: CommitIndex) -> None:
    """Claims override reachability; every branch's exclusive set is rebuilt."""
    owner = dict(discovery.owner)
    owner.update(claims)
    discovery.owner = owner
    _apply_ownership(discovery.branches, owner, index)
