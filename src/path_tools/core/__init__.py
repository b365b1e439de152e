"""Core utilities and shared components for path-tools."""

from .config import settings
from .exceptions import AccessError, PathToolsError, ValidationError
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "AccessError",
    "PathToolsError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]
