"""Pydantic schemas for vpm configuration files.

This module defines the data models for:
- lock.json (pinned repositories and profiles)
- config.toml (user configuration)
- build-info.json (record of the last successful build)
"""

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

# =============================================================================
# Common Types
# =============================================================================

ReposType = Literal["git", "static"]
BuildStrategy = Literal["symlink", "copy"]

# Full SHA-1 or SHA-256 object id. Abbreviated ids and ref names are rejected.
COMMIT_ID_PATTERN = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")


# =============================================================================
# Lock File (lock.json)
# =============================================================================


class LockedRepos(BaseModel):
    """A repository pinned in the lock file."""

    type: ReposType
    path: str
    version: str = ""
    trx_id: int = 0

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject paths that cannot name a repository."""
        if not v or v.startswith("/") or v.endswith("/"):
            raise ValueError(f"Invalid repository path: {v!r}")
        if any(part in ("", ".", "..") for part in v.split("/")):
            raise ValueError(f"Invalid repository path: {v!r}")
        return v

    @model_validator(mode="after")
    def validate_git_version(self) -> "LockedRepos":
        """Git repositories must be pinned to a full commit id."""
        if self.type == "git" and not COMMIT_ID_PATTERN.match(self.version):
            raise ValueError(
                f"Repository {self.path!r} must be pinned to a full commit id, "
                f"got {self.version!r}"
            )
        return self


class Profile(BaseModel):
    """A named selection of repositories plus startup-file flags."""

    name: str
    repos_path: list[str] = Field(default_factory=list)
    use_vimrc: bool = True
    use_gvimrc: bool = True


class LockFile(BaseModel):
    """Lock file (lock.json) schema."""

    version: int = 2
    current_profile_name: str = "default"
    repos: list[LockedRepos] = Field(default_factory=list)
    profiles: list[Profile] = Field(default_factory=lambda: [Profile(name="default")])

    @model_validator(mode="after")
    def validate_references(self) -> "LockFile":
        """Check uniqueness and that every reference resolves."""
        repos_paths = [r.path for r in self.repos]
        duplicates = sorted({p for p in repos_paths if repos_paths.count(p) > 1})
        if duplicates:
            raise ValueError(f"Duplicate repositories: {', '.join(duplicates)}")

        profile_names = [p.name for p in self.profiles]
        duplicates = sorted({n for n in profile_names if profile_names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate profiles: {', '.join(duplicates)}")

        if self.current_profile_name not in profile_names:
            raise ValueError(f"Current profile {self.current_profile_name!r} does not exist")

        known = set(repos_paths)
        for profile in self.profiles:
            missing = [p for p in profile.repos_path if p not in known]
            if missing:
                raise ValueError(
                    f"Profile {profile.name!r} refers to unknown repositories: "
                    f"{', '.join(missing)}"
                )
        return self


# =============================================================================
# User Configuration (config.toml)
# =============================================================================


class BuildConfig(BaseModel):
    """The [build] table of config.toml."""

    strategy: BuildStrategy = "symlink"


class VpmConfig(BaseModel):
    """User configuration (config.toml) schema."""

    build: BuildConfig = Field(default_factory=BuildConfig)


# =============================================================================
# Build Info (build-info.json)
# =============================================================================


class BuildInfoRepos(BaseModel):
    """A repository recorded as installed by the last build."""

    type: ReposType
    path: str
    version: str


class BuildInfo(BaseModel):
    """Record of exactly what the last successful build installed."""

    repos: list[BuildInfoRepos] = Field(default_factory=list)
    strategy: BuildStrategy = "symlink"
