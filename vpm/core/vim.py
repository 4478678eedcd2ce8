"""Locating and invoking the Vim executable."""

import logging
import shutil
import subprocess
from pathlib import Path

from vpm.utils.platform import get_env, get_vim_name

logger = logging.getLogger(__name__)


class VimError(Exception):
    """Error locating or running Vim."""


def find_vim_executable() -> Path:
    """Find the Vim executable.

    ``VPM_VIM`` overrides the lookup; otherwise ``vim`` is searched on PATH.

    Returns:
        Path to the executable

    Raises:
        VimError: If no executable is found
    """
    name = get_env("VPM_VIM") or get_vim_name()
    found = shutil.which(name)
    if found is None:
        raise VimError(f"vim executable not found: {name}")
    return Path(found)


def helptags(repos_dir: Path, vim_executable: Path) -> bool:
    """Regenerate the help tags file of a plugin.

    Does nothing when the plugin has no ``doc`` directory.

    Args:
        repos_dir: Directory containing the plugin
        vim_executable: Vim executable to run

    Returns:
        True if ``:helptags`` was run

    Raises:
        VimError: If Vim fails
    """
    doc_dir = repos_dir / "doc"
    if not doc_dir.is_dir():
        return False

    args = [
        str(vim_executable),
        "-u", "NONE",
        "-i", "NONE",
        "-N",
        "--cmd", f"cd {doc_dir}",
        "--cmd", "helptags .",
        "--cmd", "quit",
    ]  # fmt: skip
    logger.debug("Running helptags in %s", doc_dir)
    try:
        subprocess.run(args, stdin=subprocess.DEVNULL, capture_output=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise VimError(f"failed to make tags file in {doc_dir}: {e}") from e
    return True
