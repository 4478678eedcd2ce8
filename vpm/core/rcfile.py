"""Installing generated vimrc/gvimrc without clobbering user files.

A managed startup file may only be replaced if it starts with the ownership
marker. The check runs over every managed file before any of them is
touched, so one user-edited file blocks the whole build.
"""

import logging
from pathlib import Path

from vpm.config.schemas import Profile
from vpm.core.layout import GVIMRC, VIMRC, Layout
from vpm.utils.filesystem import remove_file
from vpm.utils.markers import has_magic_comment, write_with_magic_comment

logger = logging.getLogger(__name__)


class RCFileError(Exception):
    """A managed startup file is not owned by vpm, or cannot be written."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


def check_magic_comment(path: Path) -> None:
    """Raise unless ``path`` starts with the ownership marker.

    Raises:
        RCFileError: If the file lacks the marker or cannot be read
    """
    try:
        owned = has_magic_comment(path)
    except OSError as e:
        raise RCFileError(f"'{path}' does not have magic comment: {e}", path) from e
    if not owned:
        raise RCFileError(f"'{path}' does not have magic comment", path)


def check_managed_files(paths: list[Path]) -> None:
    """Pre-flight check of every managed file that already exists.

    Raises:
        RCFileError: On the first file that isn't owned by vpm
    """
    for path in paths:
        if path.exists():
            try:
                check_magic_comment(path)
            except RCFileError as e:
                raise RCFileError(f"already exists user vimrc or gvimrc: {e}", path) from e


def install_rc_file(src: Path, dest: Path) -> bool:
    """Replace ``dest`` with the marker line followed by ``src``'s bytes.

    The destination is removed first. A missing source leaves the
    destination absent.

    Args:
        src: Profile-specific source file
        dest: Managed destination

    Returns:
        True if a file was written

    Raises:
        RCFileError: If the destination cannot be removed or written
    """
    try:
        remove_file(dest)
    except OSError as e:
        raise RCFileError(f"failed to remove {dest}: {e}", dest) from e

    if not src.exists():
        logger.debug("No %s, leaving %s absent", src, dest)
        return False

    try:
        write_with_magic_comment(src, dest)
    except OSError as e:
        raise RCFileError(f"failed to install {dest}: {e}", dest) from e
    logger.debug("Installed %s from %s", dest, src)
    return True


def install_vimrc_and_gvimrc(layout: Layout, profile: Profile) -> None:
    """Install the profile's vimrc and gvimrc into Vim's directory.

    A disabled file is removed instead. Nothing is modified unless every
    existing managed file carries the ownership marker.

    Raises:
        RCFileError: If a managed file is user-owned or cannot be written
    """
    check_managed_files(layout.managed_rc_files())

    logger.info("Installing vimrc and gvimrc ...")
    try:
        layout.vim_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RCFileError(f"failed to create {layout.vim_dir}: {e}", layout.vim_dir) from e

    for filename, enabled in ((VIMRC, profile.use_vimrc), (GVIMRC, profile.use_gvimrc)):
        dest = layout.vim_dir / filename
        if enabled:
            install_rc_file(layout.rc_source(profile.name, f"{filename}.vim"), dest)
            continue
        try:
            removed = remove_file(dest)
        except OSError as e:
            raise RCFileError(f"failed to remove {dest}: {e}", dest) from e
        if removed:
            logger.debug("Removed %s (disabled by profile '%s')", dest, profile.name)
