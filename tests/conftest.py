"""Shared fixtures for vpm tests."""

import json
import os
import shutil
import subprocess
import tempfile
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from vpm.core.layout import Layout
from vpm.core.transaction import TransactionLock

GIT_ENV = {
    "GIT_AUTHOR_NAME": "vpm tests",
    "GIT_AUTHOR_EMAIL": "tests@example.com",
    "GIT_COMMITTER_NAME": "vpm tests",
    "GIT_COMMITTER_EMAIL": "tests@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}


def run_git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return its stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
        env={**os.environ, **GIT_ENV},
    )
    return result.stdout.strip()


@dataclass
class GitFixture:
    """A repository created for a test."""

    path: Path
    commit: str


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory."""
    path = Path(tempfile.mkdtemp(prefix="vpm_test_"))
    yield path
    if path.exists():
        shutil.rmtree(path)


@pytest.fixture
def layout(temp_dir: Path) -> Layout:
    """Layout rooted in the temporary directory."""
    return Layout(vpm_dir=temp_dir / "vpm", vim_dir=temp_dir / "home" / ".vim")


@pytest.fixture
def held_lock(layout: Layout) -> Generator[TransactionLock, None, None]:
    """A transaction lock held for the duration of the test."""
    lock = TransactionLock(layout.trx_lock_file)
    lock.acquire()
    yield lock
    lock.release()


@pytest.fixture
def make_git_repo() -> Callable[..., GitFixture]:
    """Factory creating a repository with one commit.

    ``files`` maps slash-separated paths to content. Paths listed in
    ``executable`` get mode 755; ``symlinks`` maps link paths to targets.
    With ``bare=True`` the result is a bare clone at ``path``.
    """

    def _make(
        path: Path,
        files: dict[str, bytes],
        executable: tuple[str, ...] = (),
        symlinks: dict[str, str] | None = None,
        bare: bool = False,
    ) -> GitFixture:
        work = path.with_name(path.name + ".work") if bare else path
        work.mkdir(parents=True)
        run_git(work, "init", "-q")
        for name, content in files.items():
            file_path = work.joinpath(*name.split("/"))
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
            file_path.chmod(0o755 if name in executable else 0o644)
        for name, target in (symlinks or {}).items():
            link_path = work.joinpath(*name.split("/"))
            link_path.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(target, link_path)
        run_git(work, "add", "-A")
        run_git(work, "commit", "-q", "-m", "initial")
        commit = run_git(work, "rev-parse", "HEAD")

        if bare:
            path.parent.mkdir(parents=True, exist_ok=True)
            run_git(work.parent, "clone", "-q", "--bare", str(work), str(path))
            shutil.rmtree(work)
        return GitFixture(path=path, commit=commit)

    return _make


@pytest.fixture
def write_lockfile(layout: Layout) -> Callable[..., Path]:
    """Factory writing lock.json with one profile selecting every repository."""

    def _write(
        repos: list[dict[str, Any]],
        profile: str = "default",
        use_vimrc: bool = True,
        use_gvimrc: bool = True,
    ) -> Path:
        data = {
            "version": 2,
            "current_profile_name": profile,
            "repos": repos,
            "profiles": [
                {
                    "name": profile,
                    "repos_path": [r["path"] for r in repos],
                    "use_vimrc": use_vimrc,
                    "use_gvimrc": use_gvimrc,
                }
            ],
        }
        layout.lock_file.parent.mkdir(parents=True, exist_ok=True)
        layout.lock_file.write_text(json.dumps(data, indent=2))
        return layout.lock_file

    return _write
