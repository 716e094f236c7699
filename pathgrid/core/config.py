"""
Configuration for pathgrid.

Tunable defaults live here as module constants. Runtime values are resolved
from environment variables and CLI flags (CLI wins) into an AppConfig, which
is passed explicitly to whatever needs it.

- ENV: PATHGRID_ALGORITHM, PATHGRID_SPEED_MS, PATHGRID_ROWS, PATHGRID_COLS
- CLI: --algo=..., --speed=..., --rows=..., --cols=...
"""

import os
import sys
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

from pathgrid.core.errors import ConfigurationError, UnknownAlgorithmError

Position = Tuple[int, int]  # (row, col)

# =============================================================================
# Grid defaults
# =============================================================================

INITIAL_ROWS = 25
INITIAL_COLUMNS = 6

# Smallest on-screen cell edge when fitting the grid to a viewport
MIN_CELL_PX = 35

# =============================================================================
# Animation
# =============================================================================

# Cells painted per tick when replaying a search
ANIMATION_BATCH_SIZE = 2

DEFAULT_SPEED_MS = 25
SPEED_CHOICES_MS = (0, 1, 10, 50, 200)

DEFAULT_ALGORITHM = "dijkstra"

# =============================================================================
# Colors (RGB)
# =============================================================================

CATEGORY_COLORS: Dict[str, Tuple[int, int, int]] = {
    "empty":   (255, 255, 255),
    "wall":    (0, 0, 0),
    "start":   (0, 128, 0),
    "end":     (255, 0, 0),
    "visited": (175, 216, 248),
    "path":    (255, 254, 106),
}


@dataclass
class GridConfig:
    rows: int = INITIAL_ROWS
    cols: int = INITIAL_COLUMNS
    start: Optional[Position] = None
    end: Optional[Position] = None


@dataclass
class AppConfig:
    rows: int = INITIAL_ROWS
    cols: int = INITIAL_COLUMNS
    algorithm: str = DEFAULT_ALGORITHM
    speed_ms: int = DEFAULT_SPEED_MS
    batch_size: int = ANIMATION_BATCH_SIZE
    min_cell_px: int = MIN_CELL_PX
    # derive rows/cols from the window; off once they are given explicitly
    fit_viewport: bool = True

    def grid_config(self) -> GridConfig:
        return GridConfig(rows=self.rows, cols=self.cols)


_ENV_KEYS = {
    "algorithm": "PATHGRID_ALGORITHM",
    "speed_ms": "PATHGRID_SPEED_MS",
    "rows": "PATHGRID_ROWS",
    "cols": "PATHGRID_COLS",
}

_CLI_FLAGS = {
    "--algo=": "algorithm",
    "--speed=": "speed_ms",
    "--rows=": "rows",
    "--cols=": "cols",
}


def _to_int(name: str, raw: str, minimum: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}",
                                 error_code="CONFIG_INT", details={"field": name})
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}",
                                 error_code="CONFIG_RANGE", details={"field": name})
    return value


def resolve_config(argv: Optional[Sequence[str]] = None,
                   environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build an AppConfig from defaults, then environment, then CLI flags."""
    argv = sys.argv[1:] if argv is None else argv
    environ = os.environ if environ is None else environ

    raw: Dict[str, str] = {}
    for field_name, env_key in _ENV_KEYS.items():
        if environ.get(env_key):
            raw[field_name] = environ[env_key]
    for arg in argv:
        for prefix, field_name in _CLI_FLAGS.items():
            if arg.startswith(prefix):
                raw[field_name] = arg.split("=", 1)[1]

    cfg = AppConfig()
    if "algorithm" in raw:
        # imported here: the registry pulls in every algorithm module
        from pathgrid.core.algorithms import normalize_algorithm
        try:
            cfg.algorithm = normalize_algorithm(raw["algorithm"])
        except UnknownAlgorithmError as ex:
            raise ConfigurationError(ex.args[0], error_code="CONFIG_ALGO",
                                     details={"field": "algorithm"}) from ex
    if "speed_ms" in raw:
        cfg.speed_ms = _to_int("speed_ms", raw["speed_ms"], 0)
    if "rows" in raw:
        cfg.rows = _to_int("rows", raw["rows"], 1)
        cfg.fit_viewport = False
    if "cols" in raw:
        cfg.cols = _to_int("cols", raw["cols"], 1)
        cfg.fit_viewport = False
    return cfg
