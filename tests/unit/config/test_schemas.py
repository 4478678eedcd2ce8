"""Tests for vpm.config.schemas module."""

import pytest
from pydantic import ValidationError

from vpm.config.schemas import (
    BuildInfo,
    LockedRepos,
    LockFile,
    Profile,
    VpmConfig,
)

COMMIT = "0123456789abcdef0123456789abcdef01234567"


class TestLockedRepos:
    """Tests for LockedRepos model."""

    def test_git_repos_with_full_commit(self):
        """A git repository pinned to a full commit id is valid."""
        repos = LockedRepos(type="git", path="github.com/org/plugin", version=COMMIT)

        assert repos.version == COMMIT
        assert repos.trx_id == 0

    def test_accepts_sha256_commit(self):
        """SHA-256 object ids are accepted."""
        repos = LockedRepos(type="git", path="a/b", version="a" * 64)

        assert len(repos.version) == 64

    @pytest.mark.parametrize("version", ["master", "v1.0.0", "HEAD", COMMIT[:12], COMMIT.upper()])
    def test_git_repos_rejects_non_commit_versions(self, version: str):
        """Branches, tags and abbreviated ids are rejected."""
        with pytest.raises(ValidationError, match="full commit id"):
            LockedRepos(type="git", path="a/b", version=version)

    def test_static_repos_needs_no_version(self):
        """Static repositories aren't versioned."""
        repos = LockedRepos(type="static", path="localhost/local/mine")

        assert repos.version == ""

    def test_rejects_unknown_type(self):
        """Only git and static are valid types."""
        with pytest.raises(ValidationError):
            LockedRepos(type="svn", path="a/b")

    @pytest.mark.parametrize("path", ["", "/abs/path", "trailing/", "a//b", "a/../b", "./a"])
    def test_rejects_invalid_paths(self, path: str):
        """Paths must be relative, slash-separated names."""
        with pytest.raises(ValidationError, match="Invalid repository path"):
            LockedRepos(type="static", path=path)


class TestLockFile:
    """Tests for LockFile model."""

    def test_default_lockfile(self):
        """An empty lock file has a default profile."""
        lockfile = LockFile()

        assert lockfile.current_profile_name == "default"
        assert [p.name for p in lockfile.profiles] == ["default"]

    def test_rejects_unknown_current_profile(self):
        """The current profile must exist."""
        with pytest.raises(ValidationError, match="does not exist"):
            LockFile(current_profile_name="work", profiles=[Profile(name="default")])

    def test_rejects_unknown_profile_repos(self):
        """Profiles may only select known repositories."""
        with pytest.raises(ValidationError, match="unknown repositories: a/b"):
            LockFile(profiles=[Profile(name="default", repos_path=["a/b"])])

    def test_rejects_duplicate_repos(self):
        """Repository paths are unique."""
        repos = LockedRepos(type="static", path="a/b")

        with pytest.raises(ValidationError, match="Duplicate repositories"):
            LockFile(repos=[repos, repos])

    def test_rejects_duplicate_profiles(self):
        """Profile names are unique."""
        with pytest.raises(ValidationError, match="Duplicate profiles"):
            LockFile(profiles=[Profile(name="default"), Profile(name="default")])


class TestVpmConfig:
    """Tests for VpmConfig model."""

    def test_defaults_to_symlink(self):
        """The link strategy is the default."""
        assert VpmConfig().build.strategy == "symlink"

    def test_rejects_unknown_strategy(self):
        """Only symlink and copy are valid strategies."""
        with pytest.raises(ValidationError):
            VpmConfig.model_validate({"build": {"strategy": "hardlink"}})


class TestBuildInfo:
    """Tests for BuildInfo model."""

    def test_serializes_lowercase_keys(self):
        """Dumps to the on-disk shape."""
        info = BuildInfo.model_validate(
            {"repos": [{"type": "git", "path": "a/b", "version": COMMIT}]}
        )

        assert info.model_dump() == {
            "repos": [{"type": "git", "path": "a/b", "version": COMMIT}],
            "strategy": "symlink",
        }
