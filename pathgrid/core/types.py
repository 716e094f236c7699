# pathgrid/core/types.py
#!/usr/bin/env python3
import math
from dataclasses import dataclass, field
from typing import List, Tuple, Optional, Dict, Any

Position = Tuple[int, int]  # (row, col)

# Cell categories (mutually exclusive)
EMPTY   = "empty"
WALL    = "wall"
START   = "start"
END     = "end"
VISITED = "visited"
PATH    = "path"

CATEGORIES = (EMPTY, WALL, START, END, VISITED, PATH)
MARKERS = (START, END)


def cell_key(row: int, col: int) -> str:
    return f"{row}x{col}"


@dataclass
class Cell:
    row: int
    col: int
    category: str = EMPTY
    cost: float = math.inf
    visited: bool = False
    predecessor: Optional[str] = None   # key of the cell this one was reached from

    @property
    def key(self) -> str:
        return cell_key(self.row, self.col)

    @property
    def position(self) -> Position:
        return (self.row, self.col)

    def reset_traversal(self) -> None:
        self.cost = math.inf
        self.visited = False
        self.predecessor = None


@dataclass
class SearchResult:
    """Outcome of one search run.

    `visited` preserves expansion order; replaying it in insertion order
    reproduces the traversal. `path` runs from the cell after start to the
    cell before end, so it is empty both when nothing was found and when start
    touches end; `found` tells the two apart.
    """
    visited: Dict[str, Cell] = field(default_factory=dict)
    path: List[Cell] = field(default_factory=list)
    found: bool = False

    @property
    def visited_order(self) -> List[Position]:
        return [c.position for c in self.visited.values()]

    @property
    def path_positions(self) -> List[Position]:
        return [c.position for c in self.path]

    @property
    def edge_count(self) -> int:
        return len(self.path) + 1 if self.found else 0


@dataclass
class StepResult:
    status: str                   # "idle" | "running" | "done" | "no_path"
    opened: List[Cell] = field(default_factory=list)
    closed: List[Cell] = field(default_factory=list)
    current: Optional[Cell] = None
    path: Optional[List[Cell]] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
