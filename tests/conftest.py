"""Test configuration and fixtures for path-tools."""

import pytest

from path_tools.filesystem.provider import LocalFileSystem
from path_tools.filesystem.tempdir import TempDirRegistry


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing."""
    return tmp_path


@pytest.fixture
def sample_tree(temp_dir):
    """Create the sample tree used by the listing tests.

    Layout::

        foo/bar/one.txt
        foo/two.txt
        foo/.three.txt
    """
    bar = temp_dir / "foo" / "bar"
    bar.mkdir(parents=True)
    (bar / "one.txt").write_text("First")
    (temp_dir / "foo" / "two.txt").write_text("Second")
    (temp_dir / "foo" / ".three.txt").write_text("Third")
    return temp_dir


@pytest.fixture
def deep_tree(sample_tree):
    """Extend the sample tree with one/two/three/four/five/deep.txt."""
    deep = sample_tree / "one" / "two" / "three" / "four" / "five"
    deep.mkdir(parents=True)
    (deep / "deep.txt").touch()
    return sample_tree


@pytest.fixture
def registry():
    """Create an isolated temporary directory registry."""
    registry = TempDirRegistry()
    yield registry
    registry.sweep()


class CountingFileSystem(LocalFileSystem):
    """Local provider that records every directory read."""

    def __init__(self):
        self.scanned = []

    def scan_directory(self, path):
        self.scanned.append(path)
        return super().scan_directory(path)


@pytest.fixture
def counting_provider():
    """Create a provider counting directory reads."""
    return CountingFileSystem()
