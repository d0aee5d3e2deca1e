"""Layout exceptions: precondition violations on the commit DAG."""

from typing import Iterable, List

from .base import LaneGraphError


class LayoutError(LaneGraphError):
    """Base class for errors raised while computing a layout."""

    pass


class CyclicHistoryError(LayoutError):
    """Raised when the parent relation contains a cycle.

    A valid commit history is a DAG. A cycle is a malformed input, so the
    layout is refused instead of silently producing a wrong picture.
    """

    def __init__(self, cycle: Iterable[str]):
        self.cycle: List[str] = sorted(cycle)
        preview = ", ".join(h[:7] for h in self.cycle[:5])
        if len(self.cycle) > 5:
            preview += ", ..."
        super().__init__(
            "Commit history contains a parent cycle",
            details={"commits": preview, "size": str(len(self.cycle))},
        )


class UnknownStrategyError(LayoutError):
    """Raised when a layout strategy name is not registered."""

    def __init__(self, name: str, available: Iterable[str]):
        self.name = name
        self.available = sorted(available)
        super().__init__(
            f"Unknown layout strategy: {name}",
            details={"available": ", ".join(self.available)},
        )
