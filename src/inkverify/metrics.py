"""
Metrics and analysis utilities for InkVerify.

Grid statistics plus bounded-history cycle detection, used to check that a
rule keeps evolving for the whole generation target.
"""

import hashlib
from collections import deque
from typing import Optional

import numpy as np

from .config import Config
from .engine import Engine
from .grid import Grid
from .pipeline import build_grid
from .rules import Rule, get_rule


def population(grid: Grid) -> int:
    """Number of alive cells in the current generation."""
    return grid.population


def density(grid: Grid) -> float:
    """Fraction of alive cells in the current generation."""
    return grid.population / grid.current.size


def activity(before: np.ndarray, after: np.ndarray) -> float:
    """
    Fraction of cells that changed state between two generations.

    Args:
        before: Cell states [H, W]
        after: Cell states [H, W]

    Returns:
        Value in [0, 1]; 0 means a fixed point
    """
    return float(np.count_nonzero(before != after)) / before.size


def state_fingerprint(grid: Grid, rule: Rule) -> bytes:
    """
    Fingerprint of the full dynamical state.

    For order-2 rules the previous generation is part of the state, so both
    buffers are hashed.
    """
    h = hashlib.blake2b(digest_size=16)
    h.update(grid.current.tobytes())
    if rule.order == 2:
        h.update(grid.next.tobytes())
    return h.digest()


class CycleDetector:
    """
    Detect repeating states within a bounded window of recent generations.

    Attributes:
        history: Maximum number of fingerprints remembered
    """

    def __init__(self, rule: Rule, history: int = 64):
        if history <= 0:
            raise ValueError(f"history must be > 0, got {history}")
        self.rule = rule
        self.history = history
        self._order: deque = deque()
        self._seen: dict[bytes, int] = {}

    def observe(self, grid: Grid, generation: int) -> Optional[int]:
        """
        Record the grid state at a generation.

        Returns:
            Period of the cycle if this state was seen within the window, else None
        """
        fp = state_fingerprint(grid, self.rule)
        if fp in self._seen:
            return generation - self._seen[fp]

        self._seen[fp] = generation
        self._order.append(fp)
        if len(self._order) > self.history:
            del self._seen[self._order.popleft()]
        return None


def find_cycle(
    config: Config,
    seed: bytes,
    history: Optional[int] = None,
) -> Optional[tuple[int, int]]:
    """
    Evolve a seeded grid and look for a repeating state.

    Args:
        config: Run configuration
        seed: 32-byte seed
        history: Window of generations to remember (default: the whole run)

    Returns:
        (generation, period) of the first repeat, or None if the grid kept
        evolving for the whole generation target
    """
    rule = get_rule(config.rule)
    detector = CycleDetector(rule, history=history or config.generations + 1)

    engine = Engine(config, build_grid(seed, config))
    detector.observe(engine.grid, 0)

    while engine.remaining > 0:
        engine.step()
        period = detector.observe(engine.grid, engine.generation)
        if period is not None:
            return engine.generation, period

    return None


def compute_all_metrics(grid: Grid, previous: Optional[np.ndarray] = None) -> dict:
    """
    Compute all available metrics.

    Args:
        grid: Grid to inspect
        previous: Optional earlier generation to measure activity against

    Returns:
        Dictionary of metrics
    """
    metrics = {
        "shape": list(grid.shape),
        "population": population(grid),
        "density": density(grid),
    }
    if previous is not None:
        metrics["activity"] = activity(previous, grid.current)
    return metrics


def print_metrics_summary(metrics: dict) -> None:
    """
    Print formatted metrics summary.

    Args:
        metrics: Output from compute_all_metrics
    """
    print("\n=== InkVerify Grid Metrics ===\n")
    height, width = metrics["shape"]
    print(f"  Grid: {width}x{height}")
    print(f"  Population: {metrics['population']}")
    print(f"  Density: {metrics['density']:.4f}")
    if "activity" in metrics:
        print(f"  Activity: {metrics['activity']:.4f}")
    print()
