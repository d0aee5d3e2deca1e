"""Output formatters for lanegraph."""

from .base import BaseFormatter
from .json_formatter import JsonFormatter, graph_to_dict
from .rich_formatter import RichFormatter, lane_occupancy

__all__ = [
    "BaseFormatter",
    "JsonFormatter",
    "RichFormatter",
    "graph_to_dict",
    "lane_occupancy",
]
