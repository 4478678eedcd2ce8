"""Platform and OS detection utilities."""

import os
import platform
from pathlib import Path
from typing import Literal

PlatformOS = Literal["windows", "linux", "macos"]


def get_os() -> PlatformOS:
    """Get the current operating system.

    Returns:
        One of: "windows", "linux", "macos"
    """
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    elif system == "windows":
        return "windows"
    else:
        return "linux"


def is_windows() -> bool:
    """Check if the current OS is Windows."""
    return get_os() == "windows"


def get_home_directory() -> Path:
    """Get the user's home directory."""
    return Path(os.path.expanduser("~"))


def get_vim_directory() -> Path:
    """Get Vim's user runtime directory.

    Returns:
        ``~/vimfiles`` on Windows, ``~/.vim`` elsewhere
    """
    return get_home_directory() / ("vimfiles" if is_windows() else ".vim")


def get_vim_name() -> str:
    """Get the default Vim executable name for the current OS."""
    return "vim.exe" if is_windows() else "vim"


def get_env(name: str, default: str | None = None) -> str | None:
    """Get an environment variable.

    Empty values are treated as unset.

    Args:
        name: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    value = os.environ.get(name)
    if not value:
        return default
    return value
