"""Tests for the temporary directory registry."""

import os
import shutil
import subprocess
import sys
from unittest.mock import patch

import pytest

from path_tools.core import settings
from path_tools.core.exceptions import (
    AccessError,
    AlreadyAbsentError,
    UnexpectedSweepError,
)
from path_tools.filesystem.provider import LocalFileSystem
from path_tools.filesystem.tempdir import TempDir, TempDirRegistry
from path_tools.path import Path


class ReadOnlyRemovalFileSystem(LocalFileSystem):
    """Provider whose removals are denied."""

    def remove_tree(self, path):
        raise PermissionError(13, "Permission denied", path)


class TestAllocate:
    """Test temporary directory allocation."""

    def test_allocate_registers_directory(self, registry, temp_dir):
        """Test a new directory exists and is tracked."""
        handle = registry.allocate(temp_dir)

        assert isinstance(handle, TempDir)
        assert os.path.isdir(handle)
        assert handle.dirname() == Path(str(temp_dir))
        assert registry.locations() == [str(handle)]
        assert handle in registry

    def test_allocate_with_prefix(self, registry, temp_dir):
        """Test the name prefix is applied."""
        handle = registry.allocate(temp_dir, prefix="scratch-")

        assert handle.basename().startswith("scratch-")
        assert len(handle.basename()) > len("scratch-")

    def test_allocate_defaults_from_settings(self, registry, temp_dir, monkeypatch):
        """Test default parent and prefix come from settings."""
        monkeypatch.setattr(settings, "temp_root", str(temp_dir))
        monkeypatch.setattr(settings, "temp_prefix", "configured-")

        handle = registry.allocate()

        assert handle.dirname() == Path(str(temp_dir))
        assert handle.basename().startswith("configured-")

    def test_allocate_unique_names(self, registry, temp_dir):
        """Test every allocation gets its own directory."""
        handles = [registry.allocate(temp_dir) for _ in range(5)]

        assert len({str(handle) for handle in handles}) == 5
        assert len(registry) == 5

    def test_allocate_missing_parent(self, registry, temp_dir):
        """Test a failed allocation leaves no registry entry."""
        with pytest.raises(AccessError) as exc_info:
            registry.allocate(temp_dir / "missing")

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert len(registry) == 0

    def test_nested_allocation(self, registry, temp_dir):
        """Test allocating inside another temporary directory."""
        outer = registry.allocate(temp_dir)
        inner = registry.allocate(outer, prefix="inner-")

        assert inner.dirname() == outer
        outer.destroy()
        assert not inner.exists()


class TestDestroy:
    """Test explicit destruction."""

    def test_destroy_removes_tree_and_entry(self, registry, temp_dir):
        """Test destroy leaves no trace on disk or in the registry."""
        handle = registry.allocate(temp_dir)
        handle.child("sub").mkdir().child("test.txt").write_text("Hello")

        handle.destroy()

        assert not os.path.exists(handle)
        assert len(registry) == 0

    def test_destroy_leaves_other_entries(self, registry, temp_dir):
        """Test destroy only drops the matching entry."""
        first = registry.allocate(temp_dir)
        second = registry.allocate(temp_dir)

        first.destroy()

        assert registry.locations() == [str(second)]

    def test_destroy_all_empties_registry(self, registry, temp_dir):
        """Test destroying every handle empties the registry."""
        handles = [registry.allocate(temp_dir) for _ in range(3)]

        for handle in handles:
            handle.destroy()

        assert len(registry) == 0

    def test_destroy_twice(self, registry, temp_dir):
        """Test a second destroy reports the directory as absent."""
        handle = registry.allocate(temp_dir)
        handle.destroy()

        with pytest.raises(AlreadyAbsentError):
            handle.destroy()

        assert len(registry) == 0

    def test_destroy_externally_removed(self, registry, temp_dir):
        """Test destroying a directory removed behind the registry's back."""
        handle = registry.allocate(temp_dir)
        shutil.rmtree(handle)

        with pytest.raises(AlreadyAbsentError):
            handle.destroy()

        assert len(registry) == 0

    def test_destroy_failure_keeps_entry(self, temp_dir):
        """Test a denied removal keeps the directory tracked."""
        registry = TempDirRegistry(provider=ReadOnlyRemovalFileSystem())
        handle = registry.allocate(temp_dir)

        with pytest.raises(AccessError) as exc_info:
            handle.destroy()

        assert not isinstance(exc_info.value, AlreadyAbsentError)
        assert handle in registry

    def test_equal_handles_share_entry(self, registry, temp_dir):
        """Test handles with the same location share one registry entry."""
        handle = registry.allocate(temp_dir)
        twin = TempDir(str(handle), registry)

        twin.destroy()

        assert len(registry) == 0
        with pytest.raises(AlreadyAbsentError):
            handle.destroy()
        registry.sweep()

    def test_context_manager(self, registry, temp_dir):
        """Test the directory is destroyed when the block exits."""
        with registry.allocate(temp_dir) as handle:
            handle.child("test.txt").write_text("Hello")
            assert handle.exists()

        assert not handle.exists()
        assert len(registry) == 0

    def test_context_manager_on_error(self, registry, temp_dir):
        """Test the directory is destroyed when the block raises."""
        with pytest.raises(RuntimeError):
            with registry.allocate(temp_dir) as handle:
                raise RuntimeError("boom")

        assert not handle.exists()

    def test_context_manager_destroyed_inside(self, registry, temp_dir):
        """Test exiting after an explicit destroy does not raise."""
        with registry.allocate(temp_dir) as handle:
            handle.destroy()

        assert not handle.exists()
        assert len(registry) == 0

    def test_context_manager_keeps_block_error(self, registry, temp_dir):
        """Test the block's own error surfaces after an explicit destroy."""
        with pytest.raises(RuntimeError, match="boom"):
            with registry.allocate(temp_dir) as handle:
                handle.destroy()
                raise RuntimeError("boom")

        assert len(registry) == 0


class TestSweep:
    """Test the exit-time sweep."""

    def test_sweep_removes_remaining(self, registry, temp_dir):
        """Test the sweep removes exactly the directories not yet destroyed."""
        handles = [registry.allocate(temp_dir) for _ in range(5)]
        for handle in handles[:2]:
            handle.destroy()

        registry.sweep()

        assert not any(handle.exists() for handle in handles)
        assert len(registry) == 0

    def test_sweep_tolerates_missing(self, registry, temp_dir):
        """Test directories already gone are not an error."""
        handles = [registry.allocate(temp_dir) for _ in range(3)]
        shutil.rmtree(handles[0])

        registry.sweep()

        assert len(registry) == 0
        assert not handles[1].exists()

    def test_sweep_twice(self, registry, temp_dir):
        """Test a second sweep has nothing left to do."""
        registry.allocate(temp_dir)
        registry.sweep()

        with patch.object(registry.provider, "remove_tree") as mock_remove:
            registry.sweep()

        mock_remove.assert_not_called()

    def test_sweep_unexpected_failure(self, temp_dir):
        """Test failures other than absence are fatal."""
        registry = TempDirRegistry(provider=ReadOnlyRemovalFileSystem())
        handle = registry.allocate(temp_dir)

        with pytest.raises(UnexpectedSweepError) as exc_info:
            registry.sweep()

        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert str(handle) in str(exc_info.value)

    def test_install_shutdown_hook_once(self):
        """Test the exit hook is registered a single time."""
        registry = TempDirRegistry()

        with patch("path_tools.filesystem.tempdir.atexit.register") as mock_register:
            registry.install_shutdown_hook()
            registry.install_shutdown_hook()

        mock_register.assert_called_once_with(registry.sweep)


class TestPathTempDir:
    """Test temporary directories created through Path."""

    def test_temp_dir(self, temp_dir):
        """Test Path.temp_dir uses the process-wide registry."""
        from path_tools.filesystem.tempdir import registry

        temp = Path.temp_dir(temp_dir, prefix="scratch-")
        dir = Path(str(temp))

        assert str(temp) in registry
        assert dir.exists()
        dir.child("test.txt").write_text("Hello World!")
        assert dir.child("test.txt").read_text() == "Hello World!"

        temp.destroy()

        assert not dir.exists()
        assert str(temp) not in registry

    def test_children_are_plain_paths(self, temp_dir):
        """Test derived paths carry no disposal capability."""
        with Path.temp_dir(temp_dir) as temp:
            child = temp.child("test.txt")

            assert type(child) is Path
            assert not hasattr(child, "destroy")


class TestAsyncTempDir:
    """Test the suspending registry operations."""

    @pytest.mark.asyncio
    async def test_aallocate_and_adestroy(self, registry, temp_dir):
        """Test async allocation and destruction."""
        handle = await registry.aallocate(temp_dir, prefix="scratch-")

        assert await handle.aexists()
        assert handle.basename().startswith("scratch-")
        await handle.child("test.txt").awrite_text("Hello World!")

        await handle.adestroy()

        assert not await handle.aexists()
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_atemp_dir_context_manager(self, temp_dir):
        """Test async with destroys the directory."""
        async with await Path.atemp_dir(temp_dir) as temp:
            assert await temp.aexists()

        assert not await temp.aexists()

    @pytest.mark.asyncio
    async def test_adestroy_twice(self, registry, temp_dir):
        """Test a second async destroy reports the directory as absent."""
        handle = await registry.aallocate(temp_dir)
        await handle.adestroy()

        with pytest.raises(AlreadyAbsentError):
            await handle.adestroy()

    @pytest.mark.asyncio
    async def test_async_context_manager_destroyed_inside(self, registry, temp_dir):
        """Test leaving async with after an explicit adestroy does not raise."""
        async with await registry.aallocate(temp_dir) as handle:
            await handle.adestroy()

        assert not await handle.aexists()
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_aallocate_missing_parent(self, registry, temp_dir):
        """Test a failed async allocation leaves no registry entry."""
        with pytest.raises(AccessError):
            await registry.aallocate(temp_dir / "missing")

        assert len(registry) == 0


SHUTDOWN_SCRIPT = """
import sys

from path_tools import Path

first = Path.temp_dir(sys.argv[1])
second = Path.temp_dir(sys.argv[1])
first.destroy()
second.child("test.txt").write_text("Hello World!")
print(second)
"""


def _run_and_exit(parent, **env):
    """Run a fresh interpreter that leaves one temporary directory behind."""
    environ = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith("PATH_TOOLS_")
    }
    environ.update(env)
    return subprocess.run(
        [sys.executable, "-c", SHUTDOWN_SCRIPT, str(parent)],
        capture_output=True,
        text=True,
        env=environ,
        timeout=60,
    )


class TestShutdownSweep:
    """Test the sweep installed at import runs when the interpreter exits."""

    def test_exit_removes_remaining(self, temp_dir):
        """Test directories not destroyed are removed at exit."""
        result = _run_and_exit(temp_dir)

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip().startswith(str(temp_dir))
        assert "Sweeping temporary directories" in result.stderr
        assert os.listdir(temp_dir) == []

    def test_exit_sweep_disabled(self, temp_dir):
        """Test directories survive exit when the sweep is switched off."""
        result = _run_and_exit(temp_dir, PATH_TOOLS_SWEEP_ON_EXIT="false")

        assert result.returncode == 0, result.stderr
        survivor = Path(result.stdout.strip())
        assert os.listdir(temp_dir) == [survivor.basename()]
        assert survivor.child("test.txt").read_text() == "Hello World!"
