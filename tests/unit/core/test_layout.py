"""Tests for vpm.core.layout module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from vpm.core.layout import Layout, encode_repos_path


class TestEncodeReposPath:
    """Tests for encode_repos_path function."""

    @pytest.mark.parametrize(
        ("repos_path", "expected"),
        [
            ("a/b", "a_b"),
            ("a_b", "a__b"),
            ("github.com/tyru/open-browser.vim", "github.com_tyru_open-browser.vim"),
            ("github.com/org/my_plugin", "github.com_org_my__plugin"),
            ("x/_y", "x___y"),
        ],
    )
    def test_escapes(self, repos_path: str, expected: str):
        """Slashes become underscores and underscores are doubled."""
        assert encode_repos_path(repos_path) == expected

    def test_no_collisions(self):
        """Paths differing only in '/' vs '_' get distinct names."""
        paths = ["a/b", "a_b", "a/_b", "a_/b", "a__b", "a/b/c", "a_b/c", "a/b_c"]

        names = [encode_repos_path(p) for p in paths]

        assert len(set(names)) == len(paths)


class TestLayout:
    """Tests for Layout paths."""

    def test_pack_subtrees(self, temp_dir: Path):
        """Link and copy destinations live in separate subtrees."""
        layout = Layout(vpm_dir=temp_dir / "vpm", vim_dir=temp_dir / ".vim")

        assert layout.opt_dir == temp_dir / ".vim" / "pack" / "vpm" / "opt"
        assert layout.start_dir == temp_dir / ".vim" / "pack" / "vpm" / "start"
        assert layout.build_info_file == temp_dir / ".vim" / "pack" / "vpm" / "build-info.json"

    def test_full_repos_path(self, temp_dir: Path):
        """Repository sources are nested by path component."""
        layout = Layout(vpm_dir=temp_dir / "vpm", vim_dir=temp_dir / ".vim")

        assert layout.full_repos_path("github.com/org/plugin") == (
            temp_dir / "vpm" / "repos" / "github.com" / "org" / "plugin"
        )

    def test_rc_source(self, temp_dir: Path):
        """rc sources are per profile."""
        layout = Layout(vpm_dir=temp_dir / "vpm", vim_dir=temp_dir / ".vim")

        expected = temp_dir / "vpm" / "rc" / "work" / "vimrc.vim"
        assert layout.rc_source("work", "vimrc.vim") == expected

    def test_from_env_uses_vpm_path(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """VPM_PATH overrides the data directory."""
        monkeypatch.setenv("VPM_PATH", str(temp_dir / "custom"))
        monkeypatch.setenv("HOME", str(temp_dir / "home"))

        with patch("vpm.utils.platform.is_windows", return_value=False):
            layout = Layout.from_env()

        assert layout.vpm_dir == temp_dir / "custom"
        assert layout.vim_dir == temp_dir / "home" / ".vim"

    def test_from_env_defaults(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """Without VPM_PATH the data directory is ~/vpm."""
        monkeypatch.delenv("VPM_PATH", raising=False)
        monkeypatch.setenv("HOME", str(temp_dir))

        with patch("vpm.utils.platform.is_windows", return_value=False):
            layout = Layout.from_env()

        assert layout.vpm_dir == temp_dir / "vpm"

    def test_from_env_windows_uses_vimfiles(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        """Windows keeps Vim's files in ~/vimfiles."""
        monkeypatch.setenv("HOME", str(temp_dir))

        with patch("vpm.utils.platform.is_windows", return_value=True):
            layout = Layout.from_env()

        assert layout.vim_dir == temp_dir / "vimfiles"
