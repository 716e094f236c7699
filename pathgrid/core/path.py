from typing import Dict, List, Optional

from pathgrid.core.errors import SearchError
from pathgrid.core.types import Cell


def reconstruct_path(end_cell: Cell, visited: Dict[str, Cell], grid=None) -> List[Cell]:
    """Backtrace from `end_cell` along predecessor keys.

    Predecessors are looked up in `visited` first and in `grid` otherwise.
    The returned cells run start -> end with both markers left out.
    """
    path: List[Cell] = []
    seen = {end_cell.key}
    cur: Optional[Cell] = end_cell
    while cur.predecessor is not None:
        key = cur.predecessor
        if key in seen:
            raise SearchError(f"predecessor cycle through {key}")
        seen.add(key)
        cur = visited.get(key) or _lookup(grid, key)
        if cur.predecessor is None:
            break   # reached start
        path.append(cur)
    path.reverse()
    return path


def _lookup(grid, key: str) -> Cell:
    if grid is None:
        raise SearchError(f"predecessor {key} not in visited set")
    row, col = (int(p) for p in key.split("x"))
    return grid.cells[row][col]
