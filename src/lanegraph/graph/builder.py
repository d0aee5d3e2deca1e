"""Branch graph construction from parsed commits and refs."""

import time
from typing import Iterable, Optional

from ..config import DEFAULT_CONFIG, LayoutConfig
from ..logging_config import get_logger
from .children import CommitIndex
from .models import BranchGraph, Commit, Ref
from .ordering import order_newest_first
from .strategies import get_strategy

logger = get_logger(__name__)


def build_branch_graph(
    commits: Iterable[Commit],
    refs: Iterable[Ref] = (),
    strategy: Optional[str] = None,
    config: Optional[LayoutConfig] = None,
) -> BranchGraph:
    """Compute the complete layout of a commit history.

    Every call works on its own structures; nothing is cached between calls,
    and the same input always yields the same graph.

    Args:
        commits: Commits in any order. Parents outside the set are ignored.
        refs: Named references; only branch refs affect the layout.
        strategy: "branch-first" or "row-by-row"; defaults to config.strategy.
        config: Layout settings; defaults to DEFAULT_CONFIG.

    Raises:
        CyclicHistoryError: If a commit is its own ancestor.
        UnknownStrategyError: If the strategy name is not registered.
    """
    config = config or DEFAULT_CONFIG
    layout_strategy = get_strategy(strategy or config.strategy)
    started = time.perf_counter()

    index = CommitIndex(order_newest_first(list(commits)))
    graph = layout_strategy.layout(index, list(refs), config)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.debug(
        "Built %s graph: %d commits, %d branches, %d merge points, max lane %d in %.1fms",
        graph.strategy,
        len(graph.commits),
        len(graph.branches),
        len(graph.merge_points),
        graph.max_lane,
        elapsed_ms,
    )
    return graph
