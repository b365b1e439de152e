"""Depth-first directory traversal.

``walk`` and ``awalk`` produce the entries found under a root directory as a
lazy sequence of ``Path`` objects. A directory is only read when the consumer
advances into it, so stopping early stops the traversal.

Depth budget:
    ``max_depth`` counts the descents still allowed below the current level.
    A level holding a budget of ``m`` lists its own entries and walks its
    subdirectories only while ``m > 0``, handing ``m - 1`` down. With
    ``max_depth=1`` the entries of the root and of its immediate
    subdirectories are listed, nothing deeper. ``max_depth=0`` disables
    recursion altogether.

Symbolic links are classified without being followed, so a link to a
directory is yielded like a file and never walked.
"""

import os
from collections.abc import AsyncIterator, Iterator
from typing import Optional

from path_tools.core import get_logger
from path_tools.core.exceptions import AccessError
from path_tools.filesystem.provider import (
    AsyncFileSystemProvider,
    AsyncLocalFileSystem,
    DirectoryEntry,
    FileSystemProvider,
    LocalFileSystem,
)
from path_tools.path import Path
from path_tools.schemas import ListOptions

logger = get_logger(__name__)

HIDDEN_PREFIX = "."


def _is_hidden(entry: DirectoryEntry) -> bool:
    return entry.name.startswith(HIDDEN_PREFIX)


def _access_error(path: str, error: OSError) -> AccessError:
    error_msg = f"Failed to list directory '{path}': {error.strerror or error}"
    logger.error(error_msg, path=path, errno=error.errno)
    return AccessError(error_msg, path=path)


def _read_level(provider: FileSystemProvider, path: str) -> list[DirectoryEntry]:
    logger.debug("Reading directory", path=path)
    try:
        return provider.scan_directory(path)
    except OSError as e:
        raise _access_error(path, e) from e


async def _aread_level(
    provider: AsyncFileSystemProvider, path: str
) -> list[DirectoryEntry]:
    logger.debug("Reading directory", path=path)
    try:
        return await provider.scan_directory(path)
    except OSError as e:
        raise _access_error(path, e) from e


def walk(
    root: "Path | str",
    options: Optional[ListOptions] = None,
    provider: Optional[FileSystemProvider] = None,
) -> Iterator[Path]:
    """List the entries under a directory.

    Args:
        root: Directory to list
        options: Listing options, defaults to files directly under ``root``
        provider: File-system provider, defaults to the local file system

    Yields:
        Absolute ``Path`` objects in depth-first order

    Raises:
        AccessError: If a directory cannot be enumerated; raised when the
            consumer reaches that directory
    """
    options = options or ListOptions()
    provider = provider or LocalFileSystem()
    start = os.path.abspath(os.fspath(root))

    # Each frame holds the unread entries of one directory and its options
    stack = [(iter(_read_level(provider, start)), options)]
    while stack:
        entries, level_options = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue

        if not level_options.hidden and _is_hidden(entry):
            continue

        if not entry.is_dir:
            yield Path(entry.path)
            continue

        if level_options.dir:
            yield Path(entry.path)
        if level_options.can_descend():
            stack.append(
                (iter(_read_level(provider, entry.path)), level_options.descend())
            )


async def awalk(
    root: "Path | str",
    options: Optional[ListOptions] = None,
    provider: Optional[AsyncFileSystemProvider] = None,
) -> AsyncIterator[Path]:
    """Suspending variant of :func:`walk`.

    Control returns to the event loop at every directory read.
    """
    options = options or ListOptions()
    provider = provider or AsyncLocalFileSystem()
    start = os.path.abspath(os.fspath(root))

    stack = [(iter(await _aread_level(provider, start)), options)]
    while stack:
        entries, level_options = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue

        if not level_options.hidden and _is_hidden(entry):
            continue

        if not entry.is_dir:
            yield Path(entry.path)
            continue

        if level_options.dir:
            yield Path(entry.path)
        if level_options.can_descend():
            level = await _aread_level(provider, entry.path)
            stack.append((iter(level), level_options.descend()))
