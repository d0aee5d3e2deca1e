"""History sources: produce (commits, refs) for the layout engine."""

from .git_reader import GitHistoryReader, parse_decorations, parse_log, parse_refs
from .json_loader import load_history, parse_history

__all__ = [
    "GitHistoryReader",
    "parse_decorations",
    "parse_log",
    "parse_refs",
    "load_history",
    "parse_history",
]
