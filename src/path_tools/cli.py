"""Command-line interface for path-tools.

Commands:
    - list: List directory contents, optionally recursive and depth-bounded
    - info: Show the elements and status of a path
"""

import stat
from itertools import islice
from typing import Annotated, Optional

import typer

from . import __version__
from .core.exceptions import PathToolsError
from .path import Path

app = typer.Typer(
    name="path-tools",
    help="Convenient container class for file-system paths.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"path-tools {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    Path-Tools: path manipulation and file-system operations.
    """
    pass


def _format_size(size: int) -> str:
    if size >= 1024**3:
        return f"{size / (1024**3):.2f} GB"
    elif size >= 1024**2:
        return f"{size / (1024**2):.2f} MB"
    elif size >= 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size} bytes"


@app.command("list")
def list_cmd(
    path: Annotated[str, typer.Argument(help="Directory to list")] = ".",
    dir: Annotated[
        bool, typer.Option("--dir", "-d", help="Include directories in the output")
    ] = False,
    hidden: Annotated[
        bool, typer.Option("--hidden", "-a", help="Include entries starting with '.'")
    ] = False,
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="Walk into subdirectories")
    ] = False,
    max_depth: Annotated[
        Optional[int],
        typer.Option("--max-depth", min=0, help="Maximum number of descents"),
    ] = None,
    max_items: Annotated[
        Optional[int],
        typer.Option("--max-items", min=1, help="Stop after this many entries"),
    ] = None,
) -> None:
    """
    List directory contents.

    Examples:
        path-tools list /data --recursive --max-depth 2
        path-tools list . --dir --hidden
    """
    try:
        entries = Path(path).list(
            dir=dir, hidden=hidden, recursive=recursive, max_depth=max_depth
        )
        for entry in islice(entries, max_items):
            typer.echo(str(entry))

    except (PathToolsError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("info")
def info_cmd(
    path: Annotated[str, typer.Argument(help="Path to describe")],
) -> None:
    """
    Show the elements of a path and, if it exists, its type and size.
    """
    try:
        target = Path(path)
        typer.echo(f"Path: {target}")
        typer.echo(f"Basename: {target.basename()}")
        typer.echo(f"Dirname: {target.dirname()}")
        typer.echo(f"Extension: {target.extname() or '-'}")
        typer.echo(f"Absolute: {'yes' if target.is_absolute() else 'no'}")

        if not target.exists():
            typer.echo("Exists: no")
            return

        info = target.lstat()
        if stat.S_ISLNK(info.st_mode):
            kind = "symlink"
        elif stat.S_ISDIR(info.st_mode):
            kind = "directory"
        else:
            kind = "file"
        typer.echo("Exists: yes")
        typer.echo(f"Type: {kind}")
        typer.echo(f"Size: {info.st_size:,} bytes ({_format_size(info.st_size)})")

    except (PathToolsError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
