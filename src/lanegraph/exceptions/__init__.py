"""Exception hierarchy for lanegraph."""

from .base import LaneGraphError
from .config import ConfigurationError, InvalidConfigError
from .history import GitCommandError, HistoryFormatError, HistorySourceError
from .layout import CyclicHistoryError, LayoutError, UnknownStrategyError

__all__ = [
    "LaneGraphError",
    "ConfigurationError",
    "InvalidConfigError",
    "LayoutError",
    "CyclicHistoryError",
    "UnknownStrategyError",
    "HistorySourceError",
    "GitCommandError",
    "HistoryFormatError",
]
