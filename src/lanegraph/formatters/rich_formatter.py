"""Rich terminal formatter for lanegraph."""

from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..graph.models import BranchGraph
from .base import BaseFormatter

NODE = "●"
MERGE_NODE = "◆"
LINE = "│"


def lane_occupancy(graph: BranchGraph) -> List[Dict[int, str]]:
    """Per display row, lane -> colour of an edge passing through that row.

    A first-parent edge runs on the child's lane down to its parent; a merge
    edge runs on the merged parent's lane up to the merge commit.
    """
    rows = {h: i for i, h in enumerate(graph.commits)}
    occupancy: List[Dict[int, str]] = [{} for _ in rows]
    for commit in graph.commits.values():
        for parent_index, parent in enumerate(commit.parents):
            if parent not in rows:
                continue
            carrier = commit if parent_index == 0 else graph.commits[parent]
            for row in range(rows[commit.hash] + 1, rows[parent]):
                occupancy[row].setdefault(carrier.lane, carrier.color)
    return occupancy


class RichFormatter(BaseFormatter):
    """One table row per commit with a glyph column per lane."""

    def __init__(self, console: Optional[Console] = None, limit: Optional[int] = None):
        self.console = console or Console()
        self.limit = limit

    def build_table(self, graph: BranchGraph) -> Table:
        table = Table(
            title=f"Commit graph ({graph.strategy})",
            show_lines=False,
            pad_edge=True,
        )
        table.add_column("Graph", no_wrap=True)
        table.add_column("Commit", style="dim", no_wrap=True)
        table.add_column("Branch", no_wrap=True)
        table.add_column("Message")

        occupancy = lane_occupancy(graph)
        width = graph.max_lane + 1
        for row, commit in enumerate(graph.commits.values()):
            if self.limit is not None and row >= self.limit:
                break
            glyphs = Text()
            for lane in range(width):
                if lane == commit.lane:
                    glyphs.append(MERGE_NODE if commit.is_merge_commit else NODE, style=commit.color)
                elif lane in occupancy[row]:
                    glyphs.append(LINE, style=occupancy[row][lane])
                else:
                    glyphs.append(" ")
                glyphs.append(" ")
            table.add_row(
                glyphs,
                commit.commit.short_hash,
                Text(commit.primary_branch, style=commit.color),
                commit.message,
            )
        return table

    def render(self, graph: BranchGraph) -> None:
        self.console.print(self.build_table(graph))

    def format(self, graph: BranchGraph) -> str:
        with self.console.capture() as capture:
            self.render(graph)
        return capture.get()
