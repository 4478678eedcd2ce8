"""On-disk layout of vpm's inputs and Vim's plugin tree."""

from dataclasses import dataclass
from pathlib import Path

from vpm.utils.platform import get_env, get_home_directory, get_vim_directory

PACK_NAME = "vpm"
VIMRC = "vimrc"
GVIMRC = "gvimrc"


def encode_repos_path(repos_path: str) -> str:
    """Escape a repository path into a flat directory name.

    ``_`` is doubled before ``/`` becomes ``_``, so distinct paths never
    collide: ``a/b`` -> ``a_b`` while ``a_b`` -> ``a__b``.

    Args:
        repos_path: Slash-separated repository path

    Returns:
        Directory name for the repository
    """
    return repos_path.replace("_", "__").replace("/", "_")


@dataclass(frozen=True)
class Layout:
    """Paths vpm reads from and writes to.

    Attributes:
        vpm_dir: Root of vpm's own data (lock file, repositories, rc sources)
        vim_dir: Vim's user runtime directory
    """

    vpm_dir: Path
    vim_dir: Path

    @classmethod
    def from_env(cls) -> "Layout":
        """Build the layout from ``VPM_PATH`` and the user's home directory."""
        vpm_dir = Path(get_env("VPM_PATH") or get_home_directory() / "vpm")
        return cls(vpm_dir=vpm_dir, vim_dir=get_vim_directory())

    @property
    def lock_file(self) -> Path:
        return self.vpm_dir / "lock.json"

    @property
    def config_file(self) -> Path:
        return self.vpm_dir / "config.toml"

    @property
    def trx_lock_file(self) -> Path:
        return self.vpm_dir / "trx.lock"

    @property
    def repos_dir(self) -> Path:
        return self.vpm_dir / "repos"

    @property
    def pack_dir(self) -> Path:
        return self.vim_dir / "pack" / PACK_NAME

    @property
    def opt_dir(self) -> Path:
        """Destinations of the link strategy."""
        return self.pack_dir / "opt"

    @property
    def start_dir(self) -> Path:
        """Destinations of a full rebuild, replaced wholesale each time."""
        return self.pack_dir / "start"

    @property
    def build_info_file(self) -> Path:
        return self.pack_dir / "build-info.json"

    def full_repos_path(self, repos_path: str) -> Path:
        """Source location of a repository."""
        return self.repos_dir.joinpath(*repos_path.split("/"))

    def rc_source(self, profile_name: str, filename: str) -> Path:
        """Profile-specific startup file source (e.g. ``vimrc.vim``)."""
        return self.vpm_dir / "rc" / profile_name / filename

    def managed_rc_files(self) -> list[Path]:
        """Startup files vpm may overwrite."""
        return [self.vim_dir / VIMRC, self.vim_dir / GVIMRC]
