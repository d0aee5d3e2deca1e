"""Base formatter interface for lanegraph output rendering."""

from abc import ABC, abstractmethod

from ..graph.models import BranchGraph


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def render(self, graph: BranchGraph) -> None:
        """Render the graph to stdout."""

    @abstractmethod
    def format(self, graph: BranchGraph) -> str:
        """Return formatted string representation of the graph."""
