"""Filesystem utilities for vpm."""

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path

from vpm.utils.platform import is_windows

logger = logging.getLogger(__name__)


def ensure_directory(path: Path, mode: int = 0o755) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
        mode: Permission bits for newly created directories

    Returns:
        The directory path
    """
    path.mkdir(mode=mode, parents=True, exist_ok=True)
    return path


def copy_directory(src: Path, dest: Path) -> Path:
    """Copy a directory recursively.

    Unlike a sync, this refuses to merge into an existing destination so
    that no stale files survive.

    Args:
        src: Source directory path
        dest: Destination directory path (must not exist)

    Returns:
        Path to the copied directory

    Raises:
        FileExistsError: If the destination already exists
    """
    if dest.exists() or dest.is_symlink():
        raise FileExistsError(f"Destination already exists: {dest}")
    shutil.copytree(src, dest, symlinks=True)
    return dest


def remove_file(path: Path) -> bool:
    """Remove a file.

    Args:
        path: File path to remove

    Returns:
        True if the file was removed, False if it didn't exist
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def write_file_with_mode(path: Path, content: bytes, mode: int) -> None:
    """Write a file and apply permission bits to it.

    Missing parent directories are created first. The permission bits are
    applied after the content is written so a read-only mode doesn't block
    the write.

    Args:
        path: Path to the file
        content: Bytes to write
        mode: Permission bits (e.g. 0o755)
    """
    ensure_directory(path.parent)
    path.write_bytes(content)
    os.chmod(path, mode)


def write_symlink(path: Path, target: str) -> None:
    """Create a symbolic link stored as a file entry (e.g. from a git tree).

    On Windows, where unprivileged symbolic links are generally unavailable,
    the link target is written as the content of a regular file instead.

    Args:
        path: Path of the link to create
        target: Link target, verbatim
    """
    ensure_directory(path.parent)
    if is_windows():
        path.write_text(target, encoding="utf-8")
        return
    os.symlink(target, path)


class Linker(ABC):
    """Strategy for exposing a source directory at a destination path."""

    name: str

    @abstractmethod
    def link(self, src: Path, dest: Path) -> None:
        """Make ``dest`` resolve to ``src`` without copying content.

        The destination must not already exist and its parent directory
        must already exist.

        Raises:
            FileExistsError: If ``dest`` already exists
            OSError: If the link cannot be created
        """


class SymlinkLinker(Linker):
    """Creates native symbolic links."""

    name = "symlink"

    def link(self, src: Path, dest: Path) -> None:
        os.symlink(src, dest, target_is_directory=True)


class JunctionLinker(Linker):
    """Creates directory junctions using ``mklink /J``."""

    name = "junction"

    def link(self, src: Path, dest: Path) -> None:
        if dest.exists() or dest.is_symlink():
            raise FileExistsError(f"Destination already exists: {dest}")
        try:
            subprocess.run(
                ["cmd", "/c", "mklink", "/J", str(dest), str(src)],
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            raise OSError(f"mklink /J failed for {dest}: {e.stderr.strip()}") from e


@lru_cache(maxsize=1)
def get_linker() -> Linker:
    """Get the link strategy for the current host.

    Selected once: directory junctions on Windows, symbolic links elsewhere.

    Returns:
        The host's Linker
    """
    linker: Linker = JunctionLinker() if is_windows() else SymlinkLinker()
    logger.debug("Using %s link strategy", linker.name)
    return linker
