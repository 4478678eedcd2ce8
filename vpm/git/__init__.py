"""Reading pinned commits from local repositories."""

from vpm.git.snapshot import GitError, GitRepository, GitTreeEntry, extract_snapshot

__all__ = ["GitError", "GitRepository", "GitTreeEntry", "extract_snapshot"]
