"""Lock file access for vpm."""

from pathlib import Path

from vpm.config.parser import ConfigError, load_lockfile
from vpm.config.schemas import LockedRepos, LockFile, Profile


class LockFileManager:
    """Read-only access to lock.json for builds."""

    def __init__(self, lock_path: Path):
        """Initialize the lock file manager.

        Args:
            lock_path: Path to lock.json
        """
        self._lock_path = lock_path
        self._lockfile: LockFile | None = None

    def load(self) -> LockFile:
        """Load the lock file from disk.

        Returns:
            The loaded lock file

        Raises:
            ConfigError: If the lock file is missing or invalid
        """
        try:
            self._lockfile = load_lockfile(self._lock_path)
        except ConfigError as e:
            raise ConfigError(f"could not read lock.json: {e}", self._lock_path) from e
        return self._lockfile

    @property
    def lockfile(self) -> LockFile:
        """Get the current lock file, loading if necessary."""
        if self._lockfile is None:
            self.load()
        assert self._lockfile is not None
        return self._lockfile

    def find_profile(self, name: str) -> Profile:
        """Get a profile by name.

        Raises:
            ConfigError: If no profile has that name
        """
        for profile in self.lockfile.profiles:
            if profile.name == name:
                return profile
        raise ConfigError(f"profile '{name}' does not exist", self._lock_path)

    def current_profile(self) -> Profile:
        """Get the profile selected by ``current_profile_name``."""
        return self.find_profile(self.lockfile.current_profile_name)

    def get_repos(self, repos_path: str) -> LockedRepos | None:
        for repos in self.lockfile.repos:
            if repos.path == repos_path:
                return repos
        return None

    def get_repos_list_by_profile(self, profile: Profile) -> list[LockedRepos]:
        """Get the repositories a profile selects, in the profile's order.

        Raises:
            ConfigError: If the profile refers to an unknown repository
        """
        repos_list = []
        for repos_path in profile.repos_path:
            repos = self.get_repos(repos_path)
            if repos is None:
                raise ConfigError(
                    f"profile '{profile.name}' refers to unknown repository '{repos_path}'",
                    self._lock_path,
                )
            repos_list.append(repos)
        return repos_list
