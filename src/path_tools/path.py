"""The ``Path`` container for file-system locations.

A ``Path`` wraps one location string and offers path manipulation and file
operations behind a single chainable interface. Derivations such as
:meth:`Path.child` always return new objects; the wrapped location never
changes.

Every I/O operation comes in two forms: a blocking method and a suspending
coroutine of the same name prefixed with ``a``::

    from path_tools import Path

    notes = Path("work", "notes.txt")
    notes.dirname().mkdir(exist_ok=True)
    notes.write_text("Hello").read_text()
    await notes.aread_text()
"""

from __future__ import annotations

import asyncio
import errno
import functools
import inspect
import os
import pathlib
import shutil
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import IO, TYPE_CHECKING, Any, Callable, Optional, Union

import aiofiles
import aiofiles.os

from path_tools.core.exceptions import ValidationError

if TYPE_CHECKING:
    from path_tools.filesystem.tempdir import TempDir

PathLike = Union["Path", str, os.PathLike]
Timestamp = Union[int, float, datetime]


@dataclass(frozen=True)
class ParsedPath:
    """Significant elements of a path.

    Attributes:
        root: Root of the path, ``"/"`` for absolute POSIX paths
        dir: Directory portion
        base: Final segment including extension
        ext: Extension including the leading dot
        name: Final segment without extension
    """

    root: str
    dir: str
    base: str
    ext: str
    name: str


def _timestamp(value: Timestamp) -> float:
    if isinstance(value, datetime):
        return value.timestamp()
    return float(value)


async def _in_thread(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a blocking call in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def _remove(location: str, recursive: bool, force: bool) -> None:
    try:
        if os.path.isdir(location) and not os.path.islink(location):
            if not recursive:
                raise IsADirectoryError(
                    errno.EISDIR, "Is a directory, use recursive=True", location
                )
            shutil.rmtree(location)
        else:
            os.remove(location)
    except FileNotFoundError:
        if not force:
            raise


def _touch(location: str) -> None:
    try:
        os.utime(location, None)
    except FileNotFoundError:
        with open(location, "a"):
            pass


class Path:
    """Container for a file-system location.

    Args:
        *parts: Path segments joined with the host's path rules; the current
            working directory when no segments are given

    Raises:
        ValidationError: If the resulting location is empty
    """

    __slots__ = ("_location", "__weakref__")

    def __init__(self, *parts: PathLike):
        if not parts:
            location = os.getcwd()
        elif len(parts) == 1:
            location = os.fspath(parts[0])
        else:
            location = os.path.join(*(os.fspath(part) for part in parts))

        if not location:
            raise ValidationError("Path location must not be empty")
        self._location = location

    @property
    def location(self) -> str:
        """The wrapped location string."""
        return self._location

    def __str__(self) -> str:
        return self._location

    def __fspath__(self) -> str:
        return self._location

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._location!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._location == other._location

    def __hash__(self) -> int:
        return hash(self._location)

    def __truediv__(self, part: PathLike) -> Path:
        return self.child(part)

    # Construction and derivation

    @classmethod
    def current_file(cls) -> Path:
        """Create a ``Path`` for the source file calling this method."""
        frame = inspect.stack()[1]
        return cls(os.path.abspath(frame.filename))

    @classmethod
    def caller_file(cls) -> Path:
        """Create a ``Path`` for the source file that called the current function."""
        frame = inspect.stack()[2]
        return cls(os.path.abspath(frame.filename))

    def child(self, *parts: PathLike) -> Path:
        """Create a new ``Path`` relative to this one.

        >>> Path("/home/user").child("notes.txt")
        Path('/home/user/notes.txt')
        """
        return Path(self._location, *parts)

    def sibling(self, *parts: PathLike) -> Path:
        """Create a new ``Path`` relative to the parent directory.

        >>> Path("/home/user/notes.txt").sibling("users.txt")
        Path('/home/user/users.txt')
        """
        return self.dirname().child(*parts)

    def dirname(self) -> Path:
        """Directory portion of the path, like the Unix ``dirname`` command."""
        return Path(os.path.dirname(self._location) or os.curdir)

    def normalize(self) -> Path:
        """Collapse redundant separators and ``.``/``..`` segments."""
        return Path(os.path.normpath(self._location))

    def relative(self, to: PathLike) -> Path:
        """Relative path from this path to ``to``."""
        return Path(os.path.relpath(os.fspath(to), self._location))

    def realpath(self) -> Path:
        """Canonical path with symbolic links resolved."""
        return Path(os.path.realpath(self._location, strict=True))

    async def arealpath(self) -> Path:
        return Path(await _in_thread(os.path.realpath, self._location, strict=True))

    # String helpers

    def basename(self, ext: Optional[str] = None) -> str:
        """Last portion of the path, like the Unix ``basename`` command.

        Args:
            ext: Suffix to strip from the result when present
        """
        name = os.path.basename(self._location.rstrip(os.sep)) or self._location
        if ext and name.endswith(ext) and name != ext:
            return name[: -len(ext)]
        return name

    def extname(self) -> str:
        """Extension of the last path segment, including the leading dot."""
        return os.path.splitext(self.basename())[1]

    def is_absolute(self) -> bool:
        return os.path.isabs(self._location)

    def to_array(self) -> list[str]:
        """Split the path on the host separator."""
        return self._location.split(os.sep)

    def to_file_url(self) -> str:
        """Absolute ``file://`` URL for the path."""
        return pathlib.Path(os.path.abspath(self._location)).as_uri()

    def to_object(self) -> ParsedPath:
        """Significant elements of the path."""
        drive, _ = os.path.splitdrive(self._location)
        root = drive + os.sep if self.is_absolute() else drive
        base = self.basename()
        name, ext = os.path.splitext(base)
        return ParsedPath(
            root=root,
            dir=os.path.dirname(self._location),
            base=base,
            ext=ext,
            name=name,
        )

    # Traversal and temporary directories

    def list(
        self,
        dir: bool = False,
        hidden: bool = False,
        recursive: bool = False,
        max_depth: Optional[int] = None,
    ) -> Iterator[Path]:
        """List entries of this directory lazily.

        >>> for file in Path("/tmp").list(recursive=True):
        ...     print(file)

        Args:
            dir: Yield directories as well as files
            hidden: Include entries whose name starts with ``.``
            recursive: Walk into subdirectories
            max_depth: Remaining number of descents, unbounded when unset

        Returns:
            Iterator of absolute ``Path`` objects in depth-first order
        """
        from path_tools.filesystem.traversal import walk
        from path_tools.schemas import ListOptions

        options = ListOptions(
            dir=dir, hidden=hidden, recursive=recursive, max_depth=max_depth
        )
        return walk(self, options)

    def alist(
        self,
        dir: bool = False,
        hidden: bool = False,
        recursive: bool = False,
        max_depth: Optional[int] = None,
    ) -> AsyncIterator[Path]:
        """Suspending variant of :meth:`list`.

        >>> async for file in Path("/tmp").alist(recursive=True):
        ...     print(file)
        """
        from path_tools.filesystem.traversal import awalk
        from path_tools.schemas import ListOptions

        options = ListOptions(
            dir=dir, hidden=hidden, recursive=recursive, max_depth=max_depth
        )
        return awalk(self, options)

    @staticmethod
    def temp_dir(
        parent: Optional[PathLike] = None, prefix: Optional[str] = None
    ) -> TempDir:
        """Create a temporary directory that is removed at exit at the latest.

        >>> with Path.temp_dir() as tmp:
        ...     tmp.child("test.txt").write_text("Hello")
        """
        from path_tools.filesystem.tempdir import registry

        return registry.allocate(parent, prefix)

    @staticmethod
    async def atemp_dir(
        parent: Optional[PathLike] = None, prefix: Optional[str] = None
    ) -> TempDir:
        from path_tools.filesystem.tempdir import registry

        return await registry.aallocate(parent, prefix)

    # Permissions and existence

    def access(self, mode: int) -> bool:
        """Test the user's permissions for the path."""
        return os.access(self._location, mode)

    async def aaccess(self, mode: int) -> bool:
        return bool(await aiofiles.os.access(self._location, mode))

    def exists(self) -> bool:
        return os.path.exists(self._location)

    async def aexists(self) -> bool:
        return bool(await aiofiles.os.path.exists(self._location))

    def is_readable(self) -> bool:
        return self.access(os.R_OK)

    async def ais_readable(self) -> bool:
        return await self.aaccess(os.R_OK)

    def is_writable(self) -> bool:
        return self.access(os.W_OK)

    async def ais_writable(self) -> bool:
        return await self.aaccess(os.W_OK)

    def chmod(self, mode: int) -> Path:
        os.chmod(self._location, mode)
        return self

    async def achmod(self, mode: int) -> Path:
        await _in_thread(os.chmod, self._location, mode)
        return self

    def chown(self, uid: int, gid: int) -> Path:
        os.chown(self._location, uid, gid)
        return self

    async def achown(self, uid: int, gid: int) -> Path:
        await _in_thread(os.chown, self._location, uid, gid)
        return self

    # Metadata

    def stat(self) -> os.stat_result:
        return os.stat(self._location)

    async def astat(self) -> os.stat_result:
        return await aiofiles.os.stat(self._location)

    def lstat(self) -> os.stat_result:
        """Like :meth:`stat`, but a symbolic link is stat-ed itself."""
        return os.lstat(self._location)

    async def alstat(self) -> os.stat_result:
        return await _in_thread(os.lstat, self._location)

    def touch(self) -> Path:
        """Create the file if missing, otherwise update its timestamps."""
        _touch(self._location)
        return self

    async def atouch(self) -> Path:
        await _in_thread(_touch, self._location)
        return self

    def utimes(self, atime: Timestamp, mtime: Timestamp) -> Path:
        os.utime(self._location, (_timestamp(atime), _timestamp(mtime)))
        return self

    async def autimes(self, atime: Timestamp, mtime: Timestamp) -> Path:
        await _in_thread(
            os.utime, self._location, (_timestamp(atime), _timestamp(mtime))
        )
        return self

    # Directories, links and moves

    def mkdir(
        self, parents: bool = False, exist_ok: bool = False, mode: int = 0o777
    ) -> Path:
        """Create the directory, and missing parents when ``parents`` is set."""
        if parents:
            os.makedirs(self._location, mode=mode, exist_ok=exist_ok)
        else:
            try:
                os.mkdir(self._location, mode)
            except FileExistsError:
                if not (exist_ok and os.path.isdir(self._location)):
                    raise
        return self

    async def amkdir(
        self, parents: bool = False, exist_ok: bool = False, mode: int = 0o777
    ) -> Path:
        if parents:
            await aiofiles.os.makedirs(self._location, mode=mode, exist_ok=exist_ok)
        else:
            try:
                await aiofiles.os.mkdir(self._location, mode)
            except FileExistsError:
                if not (exist_ok and await aiofiles.os.path.isdir(self._location)):
                    raise
        return self

    def rm(self, recursive: bool = False, force: bool = False) -> None:
        """Remove a file or directory, like the POSIX ``rm`` utility.

        Args:
            recursive: Required to remove a directory and its contents
            force: Ignore a missing path
        """
        _remove(self._location, recursive, force)

    async def arm(self, recursive: bool = False, force: bool = False) -> None:
        await _in_thread(_remove, self._location, recursive, force)

    def rename(self, new_path: PathLike) -> Path:
        """Move the path and return the new location."""
        os.rename(self._location, os.fspath(new_path))
        return Path(new_path)

    async def arename(self, new_path: PathLike) -> Path:
        await aiofiles.os.rename(self._location, os.fspath(new_path))
        return Path(new_path)

    def copy_file(self, destination: PathLike) -> Path:
        """Copy the file contents to ``destination``."""
        shutil.copyfile(self._location, os.fspath(destination))
        return self

    async def acopy_file(self, destination: PathLike) -> Path:
        await _in_thread(shutil.copyfile, self._location, os.fspath(destination))
        return self

    def symlink(self, link: PathLike) -> Path:
        """Create a symbolic link at ``link`` pointing to this path."""
        os.symlink(self._location, os.fspath(link))
        return self

    async def asymlink(self, link: PathLike) -> Path:
        await aiofiles.os.symlink(self._location, os.fspath(link))
        return self

    # File contents

    def open(self, mode: str = "r", **kwargs: Any) -> IO[Any]:
        """Open the file with the built-in ``open``."""
        return open(self._location, mode, **kwargs)

    def aopen(self, mode: str = "r", **kwargs: Any) -> Any:
        """Open the file with ``aiofiles``; use with ``async with``."""
        return aiofiles.open(self._location, mode, **kwargs)

    def read_bytes(self) -> bytes:
        with open(self._location, "rb") as f:
            return f.read()

    async def aread_bytes(self) -> bytes:
        async with aiofiles.open(self._location, "rb") as f:
            return await f.read()

    def read_text(self, encoding: str = "utf-8") -> str:
        with open(self._location, encoding=encoding) as f:
            return f.read()

    async def aread_text(self, encoding: str = "utf-8") -> str:
        async with aiofiles.open(self._location, encoding=encoding) as f:
            return await f.read()

    def lines(self, encoding: str = "utf-8") -> Iterator[str]:
        """Read the file one line at a time, without line endings."""
        with open(self._location, encoding=encoding) as f:
            for line in f:
                yield line.rstrip("\r\n")

    async def alines(self, encoding: str = "utf-8") -> AsyncIterator[str]:
        async with aiofiles.open(self._location, encoding=encoding) as f:
            async for line in f:
                yield line.rstrip("\r\n")

    def write_bytes(self, data: bytes) -> Path:
        """Write ``data``, replacing the file if it exists."""
        with open(self._location, "wb") as f:
            f.write(data)
        return self

    async def awrite_bytes(self, data: bytes) -> Path:
        async with aiofiles.open(self._location, "wb") as f:
            await f.write(data)
        return self

    def write_text(self, data: str, encoding: str = "utf-8") -> Path:
        with open(self._location, "w", encoding=encoding) as f:
            f.write(data)
        return self

    async def awrite_text(self, data: str, encoding: str = "utf-8") -> Path:
        async with aiofiles.open(self._location, "w", encoding=encoding) as f:
            await f.write(data)
        return self

    def append_bytes(self, data: bytes) -> Path:
        with open(self._location, "ab") as f:
            f.write(data)
        return self

    async def aappend_bytes(self, data: bytes) -> Path:
        async with aiofiles.open(self._location, "ab") as f:
            await f.write(data)
        return self

    def append_text(self, data: str, encoding: str = "utf-8") -> Path:
        """Append ``data``, creating the file if it does not exist."""
        with open(self._location, "a", encoding=encoding) as f:
            f.write(data)
        return self

    async def aappend_text(self, data: str, encoding: str = "utf-8") -> Path:
        async with aiofiles.open(self._location, "a", encoding=encoding) as f:
            await f.write(data)
        return self

    def truncate(self, size: int = 0) -> Path:
        os.truncate(self._location, size)
        return self

    async def atruncate(self, size: int = 0) -> Path:
        await _in_thread(os.truncate, self._location, size)
        return self
