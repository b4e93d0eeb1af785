"""Pytest configuration - shared fixtures.

Settings and the default library resolve through FREAKGEN_CFG_DIR and
FREAKGEN_LIBRARY; every test gets both pointed at a temporary directory so
nothing touches the real user data dir.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from freakgen.engine import RandomSource, generate_patch
from freakgen.presets import PresetLibrary

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture(autouse=True)
def isolated_app_dirs(tmp_path, monkeypatch):
    """Keep settings and library writes inside tmp_path."""
    monkeypatch.setenv("FREAKGEN_CFG_DIR", str(tmp_path / "cfg"))
    monkeypatch.setenv("FREAKGEN_LIBRARY", str(tmp_path / "library"))


@pytest.fixture
def project_root():
    """Return path to project root."""
    return ROOT


@pytest.fixture
def rng():
    """Seeded random source."""
    return RandomSource(1234)


@pytest.fixture
def library_dir(tmp_path):
    return tmp_path / "library"


@pytest.fixture
def library(library_dir):
    return PresetLibrary(library_dir)


@pytest.fixture
def bass_patch():
    return generate_patch("bass", "simple", "random", rng=RandomSource(42))
