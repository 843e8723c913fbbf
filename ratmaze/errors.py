"""
Exceptions raised before or around a search run.

Branch-level failures never surface here: a branch that cannot reach the
goal simply returns False.
"""


class MazeError(Exception):
    """Base exception for the package."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidDimensionError(MazeError):
    """Raised when a grid has no cells or its rows are not all of length N."""
    pass


class InvalidCoordinateError(MazeError):
    """Raised when a start or goal cell lies outside the grid."""
    pass


class MazeParseError(MazeError):
    """Raised when a text layout contains an unknown cell symbol."""
    pass


class SearchInProgressError(MazeError):
    """Raised when a run is started on an engine that is still searching."""
    pass
