"""Primitive file-system providers.

The traversal engine and the temporary directory registry never touch the
``os`` module directly. They go through a provider offering three calls:
directory enumeration, recursive removal and unique directory creation.
Providers raise plain ``OSError``; translating those into path-tools errors
is the caller's job.
"""

import asyncio
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DirectoryEntry:
    """One entry of a directory listing.

    Attributes:
        name: Final path segment of the entry
        path: Entry location, joined onto the listed directory
        is_dir: Whether the entry is a directory (symlinks are not followed)
    """

    name: str
    path: str
    is_dir: bool


class FileSystemProvider(Protocol):
    """Protocol for blocking file-system primitives."""

    def scan_directory(self, path: str) -> list[DirectoryEntry]:
        """Enumerate the direct entries of a directory."""
        ...

    def remove_tree(self, path: str) -> None:
        """Recursively remove a directory tree."""
        ...

    def make_temp_directory(self, parent: str, prefix: str) -> str:
        """Create a uniquely named directory and return its location."""
        ...


class AsyncFileSystemProvider(Protocol):
    """Protocol for suspending file-system primitives."""

    async def scan_directory(self, path: str) -> list[DirectoryEntry]:
        """Enumerate the direct entries of a directory."""
        ...

    async def remove_tree(self, path: str) -> None:
        """Recursively remove a directory tree."""
        ...

    async def make_temp_directory(self, parent: str, prefix: str) -> str:
        """Create a uniquely named directory and return its location."""
        ...


def _scan(path: str) -> list[DirectoryEntry]:
    with os.scandir(path) as entries:
        return [
            DirectoryEntry(
                name=entry.name,
                path=os.path.join(path, entry.name),
                is_dir=entry.is_dir(follow_symlinks=False),
            )
            for entry in entries
        ]


class LocalFileSystem:
    """Blocking provider backed by the local operating system."""

    def scan_directory(self, path: str) -> list[DirectoryEntry]:
        return _scan(path)

    def remove_tree(self, path: str) -> None:
        shutil.rmtree(path)

    def make_temp_directory(self, parent: str, prefix: str) -> str:
        return tempfile.mkdtemp(prefix=prefix, dir=parent)


class AsyncLocalFileSystem:
    """Suspending provider backed by the local operating system.

    Blocking calls run in the default executor so the event loop keeps
    serving other tasks while a directory is read or removed.
    """

    async def scan_directory(self, path: str) -> list[DirectoryEntry]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _scan, path)

    async def remove_tree(self, path: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, shutil.rmtree, path)

    async def make_temp_directory(self, parent: str, prefix: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, lambda: tempfile.mkdtemp(prefix=prefix, dir=parent)
        )
