"""Exact file trees from a repository's object store.

Reads the tree of a pinned commit straight from git objects, so it works for
bare repositories and never depends on the state of a working copy.

Uses system `git` command for all operations (no gitpython dependency).
File contents are streamed through a single ``git cat-file --batch`` process,
one blob at a time.
"""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from vpm.config.schemas import COMMIT_ID_PATTERN
from vpm.utils.filesystem import write_file_with_mode, write_symlink

logger = logging.getLogger(__name__)

MODE_REGULAR = "100644"
MODE_EXECUTABLE = "100755"
MODE_SYMLINK = "120000"
MODE_SUBMODULE = "160000"

_OS_MODES = {
    MODE_REGULAR: 0o644,
    MODE_EXECUTABLE: 0o755,
}


class GitError(Exception):
    """Error reading a repository's object store."""

    def __init__(self, message: str, repo_path: Path | None = None):
        self.repo_path = repo_path
        super().__init__(message)


@dataclass
class GitTreeEntry:
    """One tracked file of a commit's tree."""

    path: str  # slash-separated, relative to the tree root
    mode: str  # git mode, e.g. "100755"
    content: bytes

    @property
    def is_symlink(self) -> bool:
        return self.mode == MODE_SYMLINK

    @property
    def os_mode(self) -> int:
        """Permission bits for the host.

        Raises:
            GitError: If the git mode has no file permission equivalent
        """
        try:
            return _OS_MODES[self.mode]
        except KeyError:
            raise GitError(f"failed to convert file mode {self.mode} of {self.path}") from None


class GitRepository:
    """A local repository, bare or with a working copy."""

    def __init__(self, path: Path):
        self.path = path

    @classmethod
    def open(cls, path: Path) -> GitRepository:
        """Open the repository at ``path``.

        Only ``path`` itself is considered: a directory that merely sits
        inside some other repository is not a repository.

        Raises:
            GitError: If ``path`` is not a repository
        """
        if not path.is_dir():
            raise GitError(f"repository {str(path)!r}: no such directory", path)
        repo = cls(path)
        repo._run_git(["rev-parse", "--git-dir"])
        return repo

    def _run_git(self, args: list[str]) -> subprocess.CompletedProcess[bytes]:
        """Run a git command against this repository.

        Args:
            args: Git command arguments (without 'git')

        Returns:
            Completed process with raw stdout

        Raises:
            GitError: If the command fails or git is missing
        """
        cmd = ["git", "-C", str(self.path)] + args
        logger.debug("Running git command: %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                check=True,
                env=self._env(),
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode("utf-8", errors="replace").strip()
            raise GitError(f"repository {str(self.path)!r}: {stderr}", self.path) from e
        except FileNotFoundError as e:
            raise GitError("Git is not installed or not in PATH", self.path) from e

    def _env(self) -> dict[str, str]:
        env = dict(os.environ)
        # Stop discovery from climbing into an enclosing repository.
        env["GIT_CEILING_DIRECTORIES"] = str(self.path.resolve().parent)
        return env

    def is_bare(self) -> bool:
        """Check whether the repository has no working copy."""
        result = self._run_git(["rev-parse", "--is-bare-repository"])
        return result.stdout.strip() == b"true"

    def resolve_commit(self, commit_id: str) -> str:
        """Verify that ``commit_id`` names an existing commit object.

        Only full hexadecimal object ids are accepted. Branch, tag and other
        ref names are rejected even if they would resolve.

        Returns:
            The commit id

        Raises:
            GitError: If the id is malformed or no such commit exists
        """
        if not COMMIT_ID_PATTERN.match(commit_id):
            raise GitError(f"invalid commit id {commit_id!r}", self.path)
        try:
            result = self._run_git(["cat-file", "-t", commit_id])
        except GitError as e:
            raise GitError(f"failed to get commit object {commit_id}: {e}", self.path) from e
        object_type = result.stdout.strip().decode("ascii", errors="replace")
        if object_type != "commit":
            raise GitError(f"object {commit_id} is a {object_type}, not a commit", self.path)
        return commit_id

    def list_tree(self, commit_id: str) -> list[tuple[str, str, str, str]]:
        """List every entry of a commit's tree, recursively.

        Returns:
            (mode, type, object id, path) tuples in tree order
        """
        result = self._run_git(["ls-tree", "-r", "-z", "--full-tree", commit_id])
        entries = []
        for record in result.stdout.split(b"\0"):
            if not record:
                continue
            meta, _, raw_path = record.partition(b"\t")
            mode, object_type, object_id = meta.decode("ascii").split(" ")
            entries.append((mode, object_type, object_id, raw_path.decode("utf-8")))
        return entries

    def iter_files(self, commit_id: str) -> Iterator[GitTreeEntry]:
        """Yield each tracked file of a pinned commit with its content.

        Submodule entries carry no content and are skipped. Contents are read
        lazily: only the entry being yielded is held in memory.

        Raises:
            GitError: If the commit cannot be resolved or an object is missing
        """
        self.resolve_commit(commit_id)
        entries = self.list_tree(commit_id)

        cmd = ["git", "-C", str(self.path), "cat-file", "--batch"]
        with subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            env=self._env(),
        ) as proc:
            assert proc.stdin is not None and proc.stdout is not None
            try:
                for mode, object_type, object_id, path in entries:
                    if mode == MODE_SUBMODULE or object_type != "blob":
                        logger.debug("Skipping %s entry %s", object_type, path)
                        continue
                    content = self._read_blob(proc, object_id)
                    yield GitTreeEntry(path=path, mode=mode, content=content)
            finally:
                proc.stdin.close()
                proc.stdout.close()

    def _read_blob(self, proc: subprocess.Popen[bytes], object_id: str) -> bytes:
        assert proc.stdin is not None and proc.stdout is not None
        proc.stdin.write(object_id.encode("ascii") + b"\n")
        proc.stdin.flush()
        header = proc.stdout.readline().split()
        if len(header) != 3:
            raise GitError(f"failed to get file contents of object {object_id}", self.path)
        size = int(header[2])
        content = proc.stdout.read(size)
        proc.stdout.read(1)
        if len(content) != size:
            raise GitError(f"truncated contents of object {object_id}", self.path)
        return content


def extract_snapshot(repo: GitRepository, commit_id: str, dest: Path) -> int:
    """Write the exact tree of a pinned commit under ``dest``.

    Any failure aborts the whole extraction; files written so far are left
    in place.

    Args:
        repo: Opened repository
        commit_id: Full commit id to extract
        dest: Destination directory

    Returns:
        Number of files written

    Raises:
        GitError: If the tree cannot be read or a file cannot be written
    """
    dest.mkdir(parents=True, exist_ok=True)
    count = 0
    with contextlib.closing(repo.iter_files(commit_id)) as entries:
        for entry in entries:
            rel = PurePosixPath(entry.path)
            # Security: prevent path traversal
            if rel.is_absolute() or ".." in rel.parts:
                raise GitError(f"Unsafe path in tree: {entry.path}", repo.path)
            target = dest.joinpath(*rel.parts)
            try:
                if entry.is_symlink:
                    write_symlink(target, entry.content.decode("utf-8"))
                else:
                    write_file_with_mode(target, entry.content, entry.os_mode)
            except OSError as e:
                raise GitError(f"failed to write {target}: {e}", repo.path) from e
            count += 1
    logger.debug("Extracted %d file(s) of %s into %s", count, commit_id, dest)
    return count
