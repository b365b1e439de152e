"""Directory traversal, temporary directories and file-system providers."""

from .provider import (
    AsyncFileSystemProvider,
    AsyncLocalFileSystem,
    DirectoryEntry,
    FileSystemProvider,
    LocalFileSystem,
)
from .tempdir import TempDir, TempDirRecord, TempDirRegistry, registry
from .traversal import awalk, walk

__all__ = [
    "AsyncFileSystemProvider",
    "AsyncLocalFileSystem",
    "DirectoryEntry",
    "FileSystemProvider",
    "LocalFileSystem",
    "TempDir",
    "TempDirRecord",
    "TempDirRegistry",
    "registry",
    "awalk",
    "walk",
]
