"""File discovery and loading for a scan."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from sourceguard.scanner.errors import FileReadError, TraversalError
from sourceguard.scanner.models import ScannedFile

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".env",
    ".env.local",
    ".env.production",
)

# Substrings of the path relative to the scan root
DEFAULT_EXCLUDE = (
    "node_modules",
    ".next",
    ".git",
    "dist",
    "build",
    ".turbo",
    "coverage",
    ".nyc_output",
)


def is_env_file(name: str) -> bool:
    """Environment files are always eligible, hidden or not."""
    return name == ".env" or name.startswith(".env.")


def relative_to_root(path: str | Path, root: str | Path) -> str:
    """POSIX form of ``path`` relative to the scan root."""
    return os.path.relpath(path, root).replace(os.sep, "/")


def _list_directory(directory: str) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise TraversalError(f"Cannot list directory {directory}: {e}", directory) from e


def scan_directory(
    root: str | Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    exclude: Iterable[str] = DEFAULT_EXCLUDE,
    include_hidden: bool = False,
) -> list[str]:
    """Walk ``root`` depth-first and return the paths of matching files."""
    root_path = Path(root)
    if not root_path.is_dir():
        raise TraversalError(f"Not a readable directory: {root}", str(root))

    extensions = tuple(extensions)
    exclude = tuple(exclude)
    found: list[str] = []

    # One listing iterator per open directory, innermost last
    stack = [iter(_list_directory(str(root_path)))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        relative = relative_to_root(entry.path, root_path)
        if any(pattern in relative for pattern in exclude):
            logger.debug("Excluded %s", relative)
            continue

        name = entry.name
        if not include_hidden and name.startswith(".") and not is_env_file(name):
            continue

        if entry.is_dir(follow_symlinks=False):
            stack.append(iter(_list_directory(entry.path)))
        elif entry.is_file(follow_symlinks=False):
            if name.endswith(extensions) or is_env_file(name):
                found.append(entry.path)

    logger.debug("Found %d files under %s", len(found), root_path)
    return found


def read_file_content(path: str | Path, root: str | Path | None = None) -> ScannedFile:
    """Read one file; undecodable bytes are replaced rather than rejected."""
    try:
        content = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FileReadError(f"Cannot read {path}: {e}", str(path)) from e
    relative = relative_to_root(path, root) if root is not None else ""
    return ScannedFile(path=str(path), content=content, relative_path=relative)


async def read_files(
    paths: Sequence[str | Path], root: str | Path | None = None
) -> list[ScannedFile]:
    """Read all files concurrently, preserving input order.

    Any failed read fails the whole batch.
    """
    return list(
        await asyncio.gather(
            *(asyncio.to_thread(read_file_content, p, root) for p in paths)
        )
    )
