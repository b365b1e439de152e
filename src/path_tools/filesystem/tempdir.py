"""Temporary directory lifecycle.

Every temporary directory is registered in a process-wide table the moment
it is created. A registered directory leaves the table exactly once, either
when its handle is destroyed or when the table is swept at interpreter exit.

Lifecycle of one directory::

    CREATED -> REGISTERED -> DESTROYED
                          -> SWEPT

Registration and deregistration happen under a lock and never suspend, so
the table stays consistent across threads and event-loop tasks.
"""

import atexit
import tempfile
import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from path_tools.core import get_logger, get_tracer, settings
from path_tools.core.exceptions import (
    AccessError,
    AlreadyAbsentError,
    UnexpectedSweepError,
)
from path_tools.filesystem.provider import (
    AsyncFileSystemProvider,
    AsyncLocalFileSystem,
    FileSystemProvider,
    LocalFileSystem,
)
from path_tools.path import Path

logger = get_logger(__name__)
tracer = get_tracer(__name__)


@dataclass(frozen=True)
class TempDirRecord:
    """Bookkeeping for one registered temporary directory."""

    location: str
    created_at: float = field(default_factory=time.time)


class TempDir(Path):
    """Path to a live temporary directory owned by a registry.

    Handles are only created by :meth:`TempDirRegistry.allocate` (or
    ``Path.temp_dir``). Destroying the handle removes the directory tree and
    its registry entry. Used as a context manager, the directory is destroyed
    on exit unless it was already destroyed inside the block.
    """

    def __init__(self, location: str, registry: "TempDirRegistry"):
        super().__init__(location)
        self._registry = registry

    def destroy(self) -> None:
        """Remove the directory tree and deregister it."""
        self._registry.destroy(self)

    async def adestroy(self) -> None:
        """Suspending variant of :meth:`destroy`."""
        await self._registry.adestroy(self)

    def __enter__(self) -> "TempDir":
        return self

    def __exit__(self, *exc_info) -> None:
        # Already destroyed inside the block
        if self in self._registry:
            self.destroy()

    async def __aenter__(self) -> "TempDir":
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self in self._registry:
            await self.adestroy()


class TempDirRegistry:
    """Table of outstanding temporary directories keyed by location."""

    def __init__(
        self,
        provider: Optional[FileSystemProvider] = None,
        async_provider: Optional[AsyncFileSystemProvider] = None,
    ):
        self.provider = provider or LocalFileSystem()
        self.async_provider = async_provider or AsyncLocalFileSystem()
        self._records: dict[str, TempDirRecord] = {}
        self._lock = threading.Lock()
        self._hook_installed = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, location: object) -> bool:
        with self._lock:
            return str(location) in self._records

    def locations(self) -> list[str]:
        """Snapshot of the registered locations, oldest first."""
        with self._lock:
            return list(self._records)

    def _defaults(
        self, parent: "Path | str | None", prefix: Optional[str]
    ) -> tuple[str, str]:
        if parent is None:
            parent = settings.temp_root or tempfile.gettempdir()
        if prefix is None:
            prefix = settings.temp_prefix
        return str(parent), prefix

    def _register(self, location: str) -> TempDir:
        with self._lock:
            self._records[location] = TempDirRecord(location=location)
        logger.info("Temporary directory allocated", location=location)
        return TempDir(location, self)

    def _deregister(self, location: str) -> None:
        with self._lock:
            self._records.pop(location, None)

    def allocate(
        self, parent: "Path | str | None" = None, prefix: Optional[str] = None
    ) -> TempDir:
        """Create and register a uniquely named directory.

        Args:
            parent: Directory to create it in, the host temp area by default
            prefix: Name prefix, ``settings.temp_prefix`` by default

        Returns:
            Handle for the new directory

        Raises:
            AccessError: If the directory cannot be created
        """
        parent, prefix = self._defaults(parent, prefix)
        with tracer.start_as_current_span("tempdir.allocate"):
            try:
                location = self.provider.make_temp_directory(parent, prefix)
            except OSError as e:
                raise self._creation_error(parent, e) from e
            return self._register(location)

    async def aallocate(
        self, parent: "Path | str | None" = None, prefix: Optional[str] = None
    ) -> TempDir:
        """Suspending variant of :meth:`allocate`."""
        parent, prefix = self._defaults(parent, prefix)
        with tracer.start_as_current_span("tempdir.allocate"):
            try:
                location = await self.async_provider.make_temp_directory(
                    parent, prefix
                )
            except OSError as e:
                raise self._creation_error(parent, e) from e
            return self._register(location)

    def _creation_error(self, parent: str, error: OSError) -> AccessError:
        error_msg = f"Failed to create temporary directory in '{parent}': {error}"
        logger.error(error_msg, parent=parent, errno=error.errno)
        return AccessError(error_msg, path=parent)

    def _absent_error(self, location: str) -> AlreadyAbsentError:
        error_msg = f"Temporary directory '{location}' does not exist"
        logger.warning(error_msg, location=location)
        return AlreadyAbsentError(error_msg, path=location)

    def _removal_error(self, location: str, error: OSError) -> AccessError:
        error_msg = f"Failed to remove temporary directory '{location}': {error}"
        logger.error(error_msg, location=location, errno=error.errno)
        return AccessError(error_msg, path=location)

    def destroy(self, handle: "Path | str") -> None:
        """Remove a temporary directory tree and deregister it.

        Raises:
            AlreadyAbsentError: If the directory no longer exists; the entry
                is dropped all the same
            AccessError: If removal fails otherwise; the entry is kept so the
                exit sweep retries it
        """
        location = str(handle)
        try:
            self.provider.remove_tree(location)
        except FileNotFoundError as e:
            # Already gone, nothing left to track
            self._deregister(location)
            raise self._absent_error(location) from e
        except OSError as e:
            raise self._removal_error(location, e) from e
        self._deregister(location)
        logger.info("Temporary directory destroyed", location=location)

    async def adestroy(self, handle: "Path | str") -> None:
        """Suspending variant of :meth:`destroy`."""
        location = str(handle)
        try:
            await self.async_provider.remove_tree(location)
        except FileNotFoundError as e:
            # Already gone, nothing left to track
            self._deregister(location)
            raise self._absent_error(location) from e
        except OSError as e:
            raise self._removal_error(location, e) from e
        self._deregister(location)
        logger.info("Temporary directory destroyed", location=location)

    def sweep(self) -> None:
        """Remove every directory still registered.

        Directories that no longer exist are skipped. Any other failure stops
        the sweep.

        Raises:
            UnexpectedSweepError: If a directory cannot be removed
        """
        locations = self.locations()
        if not locations:
            return

        logger.info("Sweeping temporary directories", count=len(locations))
        with tracer.start_as_current_span("tempdir.sweep"):
            for location in locations:
                try:
                    self.provider.remove_tree(location)
                except FileNotFoundError:
                    logger.debug(
                        "Temporary directory already removed", location=location
                    )
                except OSError as e:
                    error_msg = f"Failed to sweep temporary directory '{location}': {e}"
                    logger.error(error_msg, location=location, errno=e.errno)
                    raise UnexpectedSweepError(error_msg) from e
                self._deregister(location)

    def install_shutdown_hook(self) -> None:
        """Sweep this registry when the interpreter exits normally."""
        with self._lock:
            if self._hook_installed:
                return
            self._hook_installed = True
        atexit.register(self.sweep)


registry = TempDirRegistry()
