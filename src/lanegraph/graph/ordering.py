"""Newest-first ordering of a commit set.

Both strategies work over one row order: children always precede their
parents. A log emitted with --topo-order already satisfies this and is kept
as given; otherwise commits are sorted by date (newest first, input order
breaking ties) and then made topological with a stable Kahn pass.

A parent cycle makes any such order impossible and is the one input defect
that is reported instead of degraded around.
"""

from __future__ import annotations

import heapq
from typing import Iterable, Sequence

from ..exceptions import CyclicHistoryError
from ..logging_config import get_logger
from .algorithms import find_parent_cycles
from .models import Commit

logger = get_logger(__name__)


def dedupe_commits(commits: Iterable[Commit]) -> list[Commit]:
    """Drop repeated hashes, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[Commit] = []
    duplicates = 0
    for commit in commits:
        if commit.hash in seen:
            duplicates += 1
            continue
        seen.add(commit.hash)
        unique.append(commit)
    if duplicates:
        logger.warning("Ignored %d duplicate commit entries", duplicates)
    return unique


def is_topologically_ordered(commits: Sequence[Commit]) -> bool:
    """True if every in-set parent appears after its child."""
    position = {c.hash: i for i, c in enumerate(commits)}
    for i, commit in enumerate(commits):
        for parent in commit.parents:
            j = position.get(parent)
            if j is not None and j <= i:
                return False
    return True


def _date_key(indexed: tuple[int, Commit]) -> tuple:
    index, commit = indexed
    if commit.date is None:
        return (1, 0.0, index)
    return (0, -commit.date.timestamp(), index)


def order_newest_first(commits: Sequence[Commit]) -> list[Commit]:
    """Return commits in a stable newest-first topological order.

    Raises:
        CyclicHistoryError: If the parent relation contains a cycle.
    """
    commits = dedupe_commits(commits)
    if is_topologically_ordered(commits):
        return commits

    logger.debug("Input is not in topological order; sorting %d commits by date", len(commits))
    preferred = [c for _, c in sorted(enumerate(commits), key=_date_key)]
    rank = {c.hash: i for i, c in enumerate(preferred)}
    by_hash = {c.hash: c for c in preferred}

    # in-degree counts distinct in-set children
    pending_children: dict[str, int] = {h: 0 for h in by_hash}
    for commit in preferred:
        for parent in set(commit.parents):
            if parent in pending_children:
                pending_children[parent] += 1

    heap = [rank[h] for h, count in pending_children.items() if count == 0]
    heapq.heapify(heap)
    ordered: list[Commit] = []
    while heap:
        commit = preferred[heapq.heappop(heap)]
        ordered.append(commit)
        for parent in set(commit.parents):
            if parent not in pending_children:
                continue
            pending_children[parent] -= 1
            if pending_children[parent] == 0:
                heapq.heappush(heap, rank[parent])

    if len(ordered) < len(preferred):
        _raise_cycle(preferred, {c.hash for c in ordered})

    return ordered


def _raise_cycle(commits: Sequence[Commit], placed: set[str]) -> None:
    stuck = {c.hash for c in commits} - placed
    parents = {c.hash: list(c.parents) for c in commits if c.hash in stuck}
    cycles = find_parent_cycles(parents, stuck)
    cycle = min(cycles, key=lambda s: sorted(s)) if cycles else stuck
    raise CyclicHistoryError(cycle)


def row_index(ordered: Sequence[Commit]) -> dict[str, int]:
    """hash -> display row (0 = newest)."""
    return {c.hash: row for row, c in enumerate(ordered)}
