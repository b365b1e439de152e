"""Exception hierarchy for path-tools."""

from typing import Optional


class PathToolsError(Exception):
    """Base exception for all path-tools errors."""

    pass


class ValidationError(PathToolsError):
    """Raised when validation fails."""

    pass


class AccessError(PathToolsError):
    """Raised when a location cannot be enumerated, created or removed.

    Attributes:
        path: The location the failed operation was applied to
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class AlreadyAbsentError(AccessError):
    """Raised when a location to be removed does not exist."""

    pass


class UnexpectedSweepError(PathToolsError):
    """Raised when the exit-time sweep fails for a reason other than absence."""

    pass
