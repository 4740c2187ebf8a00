"""
Pytest configuration and fixtures for InkVerify tests.
"""

import pytest

from inkverify.config import Config
from inkverify.grid import Grid
from inkverify.pipeline import build_grid, derive_seed


@pytest.fixture
def default_config() -> Config:
    """Default configuration for tests."""
    return Config(width=32, height=32, generations=50)


@pytest.fixture
def small_config() -> Config:
    """Small grid for fast tests."""
    return Config(width=8, height=8, generations=10)


@pytest.fixture
def seed() -> bytes:
    """Seed of the reference credential."""
    return derive_seed(("alice", "correct-horse"))


@pytest.fixture
def default_grid(default_config: Config, seed: bytes) -> Grid:
    """Seeded initial grid for tests."""
    return build_grid(seed, default_config)


def make_grid(rows: list[str]) -> Grid:
    """Build a grid from rows of '.' and '#'."""
    grid = Grid(len(rows[0]), len(rows))
    for y, row in enumerate(rows):
        for x, ch in enumerate(row):
            grid.current[y, x] = 1 if ch == "#" else 0
    return grid
