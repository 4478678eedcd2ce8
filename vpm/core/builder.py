"""Building Vim's plugin tree from the lock file.

Two builders exist. The symlink builder links each working copy into
``pack/vpm/opt`` (bare repositories are extracted instead). The copy builder
rebuilds ``pack/vpm/start`` from scratch, extracting every git repository at
its pinned commit and copying static repositories.

Repositories are installed concurrently, one thread per repository. Workers
are never cancelled: when one fails, the others still run to completion and
may keep writing to the plugin tree after the build has been declared failed.
"""

import logging
import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from vpm.config.parser import ConfigError, load_config
from vpm.config.schemas import BuildInfo, BuildStrategy, LockedRepos
from vpm.core.buildinfo import make_build_info, write_build_info
from vpm.core.layout import Layout, encode_repos_path
from vpm.core.lockfile import LockFileManager
from vpm.core.rcfile import RCFileError, install_vimrc_and_gvimrc
from vpm.core.retire import retire_directory
from vpm.core.transaction import TransactionLock
from vpm.core.vim import VimError, find_vim_executable, helptags
from vpm.git import GitError, GitRepository, extract_snapshot
from vpm.utils.filesystem import Linker, copy_directory, get_linker

logger = logging.getLogger("vpm.builder")


class BuildError(Exception):
    """Error building the plugin tree."""

    def __init__(self, message: str, failed: list["InstallResult"] | None = None):
        self.failed = failed or []
        super().__init__(message)


@dataclass
class InstallResult:
    """Outcome of installing one repository."""

    repos: LockedRepos
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BuildSummary:
    """Summary of a successful build."""

    strategy: BuildStrategy
    target_dir: Path
    build_info: BuildInfo
    results: list[InstallResult] = field(default_factory=list)


class Builder(ABC):
    """Base class for plugin tree builders."""

    strategy: BuildStrategy

    def __init__(self, layout: Layout, lock: TransactionLock, linker: Linker | None = None):
        """Initialize the builder.

        Args:
            layout: Paths to read from and write to
            lock: Transaction lock, acquired and released by the caller
            linker: Link strategy (defaults to the host's)
        """
        self.layout = layout
        self.lock = lock
        self.linker = linker or get_linker()

    @property
    @abstractmethod
    def target_dir(self) -> Path:
        """Directory this builder replaces and populates."""

    @abstractmethod
    def install_repos(self, repos: LockedRepos, dest: Path, vim_executable: Path) -> None:
        """Install one repository at ``dest``.

        Raises:
            Exception: Any failure; it is reported through the repository's result
        """

    def build(self) -> BuildSummary:
        """Build the plugin tree for the lock file's current profile.

        Returns:
            BuildSummary describing what was installed

        Raises:
            BuildError: If any step fails
        """
        if not self.lock.held:
            raise BuildError("transaction lock is not held")

        # Exit if vim executable was not found in PATH
        try:
            vim_executable = find_vim_executable()
        except VimError as e:
            raise BuildError(str(e)) from e

        manager = LockFileManager(self.layout.lock_file)
        try:
            profile = manager.current_profile()
            repos_list = manager.get_repos_list_by_profile(profile)
        except ConfigError as e:
            raise BuildError(str(e)) from e

        try:
            install_vimrc_and_gvimrc(self.layout, profile)
        except RCFileError as e:
            raise BuildError(str(e)) from e

        target_dir = self.target_dir
        logger.info("Rebuilding %s directory ...", target_dir)
        try:
            retired = retire_directory(target_dir)
        except OSError as e:
            raise BuildError(f"failed to replace '{target_dir}': {e}") from e

        logger.info("Installing all repositories files ...")
        results = self.install_all(repos_list, target_dir, vim_executable)

        removal_error = retired.wait() if retired is not None else None

        failed = [r for r in results if not r.success]
        if failed:
            messages = [f"failed to install repository '{r.repos.path}': {r.error}" for r in failed]
            if removal_error is not None:
                messages.append(f"failed to remove '{retired.path}': {removal_error}")
            raise BuildError("\n".join(messages), failed)
        if removal_error is not None:
            raise BuildError(f"failed to remove '{retired.path}': {removal_error}")

        build_info = make_build_info(repos_list, self.strategy)
        try:
            write_build_info(self.layout.build_info_file, build_info)
        except OSError as e:
            raise BuildError(f"failed to write '{self.layout.build_info_file}': {e}") from e

        return BuildSummary(
            strategy=self.strategy,
            target_dir=target_dir,
            build_info=build_info,
            results=results,
        )

    def install_all(
        self, repos_list: list[LockedRepos], target_dir: Path, vim_executable: Path
    ) -> list[InstallResult]:
        """Install every repository concurrently and collect all outcomes.

        Always waits for exactly one result per repository, however many
        of them failed.

        Returns:
            Results in completion order
        """
        done: queue.Queue[InstallResult] = queue.Queue(maxsize=len(repos_list))
        for repos in repos_list:
            dest = target_dir / encode_repos_path(repos.path)
            threading.Thread(
                target=self._install_worker,
                args=(repos, dest, vim_executable, done),
                name=f"install-{repos.path}",
            ).start()

        results = []
        for _ in range(len(repos_list)):
            result = done.get()
            if result.success:
                logger.debug(
                    "Installing %s repository %s ... Done.", result.repos.type, result.repos.path
                )
            else:
                logger.error("Failed to install %s: %s", result.repos.path, result.error)
            results.append(result)
        return results

    def _install_worker(
        self,
        repos: LockedRepos,
        dest: Path,
        vim_executable: Path,
        done: "queue.Queue[InstallResult]",
    ) -> None:
        # Exactly one put per worker, whatever happens.
        try:
            self.install_repos(repos, dest, vim_executable)
        except Exception as e:
            done.put(InstallResult(repos, e))
            return
        done.put(InstallResult(repos))

    def open_git_repos(self, src: Path) -> GitRepository:
        try:
            return GitRepository.open(src)
        except GitError as e:
            raise GitError(f"failed to open repository: {e}", src) from e


class SymlinkBuilder(Builder):
    """Links working copies into ``pack/vpm/opt``."""

    strategy: BuildStrategy = "symlink"

    @property
    def target_dir(self) -> Path:
        return self.layout.opt_dir

    def install_repos(self, repos: LockedRepos, dest: Path, vim_executable: Path) -> None:
        src = self.layout.full_repos_path(repos.path)
        if repos.type == "git":
            repo = self.open_git_repos(src)
            if repo.is_bare():
                # Nothing to link to: copy files out of git objects
                extract_snapshot(repo, repos.version, dest)
                helptags(dest, vim_executable)
                return
        elif repos.type != "static":
            raise BuildError(f"invalid repository type: {repos.type}")

        self.linker.link(src, dest)
        helptags(src, vim_executable)


class CopyBuilder(Builder):
    """Rebuilds ``pack/vpm/start`` from pinned commits and static copies."""

    strategy: BuildStrategy = "copy"

    @property
    def target_dir(self) -> Path:
        return self.layout.start_dir

    def install_repos(self, repos: LockedRepos, dest: Path, vim_executable: Path) -> None:
        src = self.layout.full_repos_path(repos.path)
        if repos.type == "git":
            repo = self.open_git_repos(src)
            extract_snapshot(repo, repos.version, dest)
            logger.info("Installing git repository %s ... Done.", repos.path)
        elif repos.type == "static":
            try:
                copy_directory(src, dest)
            except OSError as e:
                raise BuildError(f"failed to copy static directory: {e}") from e
            logger.info("Installing static directory %s ... Done.", repos.path)
        else:
            raise BuildError(f"invalid repository type: {repos.type}")


def get_builder(
    layout: Layout,
    lock: TransactionLock,
    full: bool = False,
    linker: Linker | None = None,
) -> Builder:
    """Create the builder for a build request.

    A full build always copies. Otherwise ``[build] strategy`` in
    config.toml decides.

    Raises:
        BuildError: If config.toml is invalid
    """
    if full:
        return CopyBuilder(layout, lock, linker)

    try:
        config = load_config(layout.config_file)
    except ConfigError as e:
        raise BuildError(str(e)) from e

    if config.build.strategy == "copy":
        return CopyBuilder(layout, lock, linker)
    return SymlinkBuilder(layout, lock, linker)
