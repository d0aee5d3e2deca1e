"""Graph algorithms over the parent relation: reachability, first-parent chains, SCC."""

from __future__ import annotations

import heapq
from collections import deque
from typing import Callable, Iterable, Optional

ParentLookup = Callable[[str], Iterable[str]]


def reachable_from(
    start: str,
    parents_of: ParentLookup,
    known: Callable[[str], bool],
    blocked: Optional[Callable[[str], bool]] = None,
) -> list[str]:
    """Reverse breadth-first walk from start along parent edges.

    Returns hashes in visit order (newest first along each path), start
    included. Hashes for which known() is False are never entered; hashes for
    which blocked() is True are not entered either. The visited set bounds the
    walk even on malformed (cyclic) input.
    """
    if not known(start) or (blocked is not None and blocked(start)):
        return []

    order: list[str] = []
    visited: set[str] = {start}
    queue: deque[str] = deque([start])
    while queue:
        node = queue.popleft()
        order.append(node)
        for parent in parents_of(node):
            if parent in visited or not known(parent):
                continue
            if blocked is not None and blocked(parent):
                continue
            visited.add(parent)
            queue.append(parent)
    return order


def first_parent_chain(
    start: str,
    first_parent_of: Callable[[str], Optional[str]],
    known: Callable[[str], bool],
) -> list[str]:
    """Follow first-parent edges from start until leaving the known set."""
    chain: list[str] = []
    seen: set[str] = set()
    current: Optional[str] = start
    while current is not None and known(current) and current not in seen:
        seen.add(current)
        chain.append(current)
        current = first_parent_of(current)
    return chain


def tarjan_scc(adjacency: dict[str, list[str]], all_nodes: set[str]) -> list[set[str]]:
    """Tarjan's algorithm for strongly connected components (iterative).

    Uses an explicit call stack to avoid Python recursion limits on long
    commit chains.
    """
    counter = 0
    scc_stack: list[str] = []
    on_stack: set[str] = set()
    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    result: list[set[str]] = []

    for root in sorted(all_nodes):
        if root in index:
            continue

        call_stack: list[tuple] = []
        index[root] = lowlink[root] = counter
        counter += 1
        scc_stack.append(root)
        on_stack.add(root)
        neighbors = [w for w in adjacency.get(root, []) if w in all_nodes]
        call_stack.append((root, iter(neighbors)))

        while call_stack:
            v, it = call_stack[-1]
            pushed = False
            for w in it:
                if w not in index:
                    index[w] = lowlink[w] = counter
                    counter += 1
                    scc_stack.append(w)
                    on_stack.add(w)
                    w_neighbors = [n for n in adjacency.get(w, []) if n in all_nodes]
                    call_stack.append((w, iter(w_neighbors)))
                    pushed = True
                    break
                elif w in on_stack:
                    lowlink[v] = min(lowlink[v], index[w])

            if not pushed:
                call_stack.pop()
                if call_stack:
                    caller = call_stack[-1][0]
                    lowlink[caller] = min(lowlink[caller], lowlink[v])

                if lowlink[v] == index[v]:
                    component: set[str] = set()
                    while True:
                        w = scc_stack.pop()
                        on_stack.discard(w)
                        component.add(w)
                        if w == v:
                            break
                    result.append(component)

    return result


def find_parent_cycles(parents: dict[str, list[str]], nodes: Optional[set[str]] = None) -> list[set[str]]:
    """Return every cycle of the parent relation: SCCs of size > 1 and self-parents."""
    all_nodes = set(parents) if nodes is None else nodes
    cycles = [scc for scc in tarjan_scc(parents, all_nodes) if len(scc) > 1]
    for node in sorted(all_nodes):
        if node in parents.get(node, []):
            cycles.append({node})
    return cycles


def merged_segment(
    merged_parent: str,
    base_parent: Optional[str],
    parents_of: ParentLookup,
    row: dict[str, int],
) -> list[str]:
    """Commits reachable from merged_parent but not from base_parent.

    Walks both ancestries together in row order (children before parents),
    painting each commit with the side(s) that reach it, and stops once no
    queued commit is reachable from the merged side alone. The walk only
    covers the region between the merge and the fork point instead of the
    whole base history.

    Returns the segment newest first, merged_parent included.
    """
    if merged_parent not in row:
        return []

    base, seg = 1, 2
    paint: dict[str, int] = {}
    heap: list[tuple[int, str]] = []
    seg_only = 0

    def mark(node: str, flags: int) -> None:
        nonlocal seg_only
        old = paint.get(node)
        new = (old or 0) | flags
        if old == new:
            return
        if old is None:
            heapq.heappush(heap, (row[node], node))
        elif old == seg:
            seg_only -= 1
        if new == seg:
            seg_only += 1
        paint[node] = new

    if base_parent is not None and base_parent in row:
        mark(base_parent, base)
    mark(merged_parent, seg)

    segment: list[str] = []
    while heap and seg_only:
        _, node = heapq.heappop(heap)
        flags = paint[node]
        if flags == seg:
            seg_only -= 1
            segment.append(node)
        for parent in parents_of(node):
            if parent in row:
                mark(parent, flags)
    return segment
