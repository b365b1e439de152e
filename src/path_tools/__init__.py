"""Convenient container class for file-system paths.

This package wraps a file-system location in a ``Path`` object that combines
path manipulation with file operations behind one chainable interface. Every
I/O operation is offered as a blocking method and as an ``a``-prefixed
coroutine.

Key Features:
    - Path derivation (child, sibling, dirname, normalize, relative)
    - Read, write, stat, chmod, symlink and rename passthroughs
    - Lazy, depth-bounded directory listing
    - Temporary directories removed on destroy or at interpreter exit

Recommended Usage:

    >>> from path_tools import Path
    >>> tmp = Path.temp_dir()
    >>> tmp.child("foo").mkdir().child("bar.txt").write_text("Hello")
    >>> [str(p) for p in tmp.list(recursive=True)]
    >>> tmp.destroy()

Advanced Usage:
    Import the engine and registry for custom providers:

    >>> from path_tools.filesystem import TempDirRegistry, walk
"""

__version__ = "0.1.0"

from .core import settings
from .core.exceptions import (
    AccessError,
    AlreadyAbsentError,
    PathToolsError,
    UnexpectedSweepError,
    ValidationError,
)
from .filesystem import TempDir, TempDirRegistry, awalk, registry, walk
from .path import ParsedPath, Path
from .schemas import ListOptions

if settings.sweep_on_exit:
    registry.install_shutdown_hook()

__all__ = [
    # Path values
    "Path",
    "ParsedPath",
    "TempDir",
    # Options
    "ListOptions",
    # Traversal and temporary directories
    "walk",
    "awalk",
    "TempDirRegistry",
    "registry",
    # Errors
    "PathToolsError",
    "ValidationError",
    "AccessError",
    "AlreadyAbsentError",
    "UnexpectedSweepError",
]
