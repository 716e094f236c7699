"""Exceptions raised by the pathgrid engine."""

from typing import Optional, Tuple


class PathgridError(Exception):
    """Base exception class for pathgrid."""

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        """Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            details: Optional additional error details
        """
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.error_code:
            return f"[{self.error_code}] {base_msg}"
        return base_msg


class ConfigurationError(PathgridError):
    """Raised for invalid configuration values (env vars, CLI flags)."""
    pass


class GridError(PathgridError):
    """Raised when a grid operation cannot be honoured."""
    pass


class GridDimensionError(GridError):
    """Raised for grids too small for the requested operation."""

    def __init__(self, message: str, rows: int = None, cols: int = None, **kwargs):
        super().__init__(message, **kwargs)
        self.rows = rows
        self.cols = cols


class InvalidPositionError(GridError):
    """Raised for out-of-bounds, blocked or colliding marker positions."""

    def __init__(self, message: str, position: Optional[Tuple[int, int]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.position = position


class SearchError(PathgridError):
    """Raised when a search cannot be set up or its snapshot is corrupt."""
    pass


class UnknownAlgorithmError(SearchError):
    """Raised for an algorithm identifier that is not registered."""

    def __init__(self, message: str, algorithm: str = None, **kwargs):
        super().__init__(message, **kwargs)
        self.algorithm = algorithm


class MazeGenerationError(PathgridError):
    """Raised when the maze generator is handed an unusable grid."""
    pass
