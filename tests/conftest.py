"""Shared pytest fixtures for filesystem-bound validation tests"""

import os
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture
def make_symlink() -> Callable[[Path, Path], Path]:
    """
    Fixture returning a factory that creates link -> target.
    Tests using it are skipped where the platform or user cannot create symlinks.
    """

    def _make(link: Path, target: Path) -> Path:
        try:
            os.symlink(target, link)
        except (OSError, NotImplementedError) as e:
            pytest.skip(f"symlinks unavailable: {e}")
        return link

    return _make


@pytest.fixture
def home_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated home directory exported as HOME"""
    home = tmp_path / "home" / "alice"
    home.mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home))
    return home
