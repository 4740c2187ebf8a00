"""
Evolution engine for InkVerify.

Applies the configured rule to every cell once per generation until the
generation target is reached. This is where the work of a lock is spent.
"""

import logging
from typing import Callable, Optional

from tqdm import tqdm

from .config import Config
from .errors import ConfigurationError
from .grid import Grid
from .rules import get_rule, next_cell_state, NEIGHBOR_OFFSETS

logger = logging.getLogger(__name__)


class Engine:
    """
    Drives one grid through the configured number of generations.

    The engine owns the grid for the duration of the run.

    Attributes:
        config: Run configuration
        grid: Grid substrate being evolved
        rule: Update rule resolved from config.rule
        generation: Number of generations applied so far
    """

    def __init__(self, config: Config, grid: Grid):
        """
        Initialize engine.

        Args:
            config: Run configuration
            grid: Initialized grid whose dimensions match config
        """
        if not isinstance(grid, Grid):
            raise ConfigurationError(f"expected a Grid, got {type(grid).__name__}")
        if (grid.width, grid.height) != (config.width, config.height):
            raise ConfigurationError(
                f"grid is {grid.width}x{grid.height} but config expects "
                f"{config.width}x{config.height}"
            )

        self.config = config
        self.grid = grid
        self.rule = get_rule(config.rule)
        self.generation = 0

    @property
    def remaining(self) -> int:
        """Generations left before the target is reached."""
        return self.config.generations - self.generation

    def step(self) -> None:
        """
        Advance the grid by one generation.

        Reads current (and next as the previous generation for order-2
        rules), writes next, then swaps.
        """
        previous = self.grid.next if self.rule.order == 2 else None
        self.grid.write_next(self.rule.apply(self.grid.current, previous))
        self.grid.swap(clear=self.rule.order == 1)
        self.generation += 1

    def step_reference(self) -> None:
        """
        Advance by one generation, one cell at a time.

        Produces the same result as step() through point reads and writes.
        Much slower; used to cross-check the vectorized path.
        """
        grid = self.grid
        previous = grid.next.copy()
        for y in range(grid.height):
            for x in range(grid.width):
                neighbors = sum(grid.get(x + dx, y + dy) for dy, dx in NEIGHBOR_OFFSETS)
                state = next_cell_state(
                    self.rule, grid.get(x, y), neighbors, int(previous[y, x])
                )
                grid.set_next(x, y, state)
        grid.swap(clear=self.rule.order == 1)
        self.generation += 1

    def run(
        self,
        callback: Optional[Callable[["Engine"], None]] = None,
        callback_interval: int = 100,
        show_progress: bool = False,
    ) -> Grid:
        """
        Run until the generation target is reached.

        Args:
            callback: Optional function called periodically
            callback_interval: How often to call callback
            show_progress: Whether to show progress bar

        Returns:
            The evolved grid
        """
        if callback is not None and callback_interval <= 0:
            raise ValueError(f"callback_interval must be > 0, got {callback_interval}")

        logger.debug(
            "Evolving %dx%d grid for %d generations with rule %s v%d",
            self.grid.width, self.grid.height, self.remaining,
            self.rule.name, self.rule.version,
        )

        iterator = range(self.remaining)
        if show_progress:
            iterator = tqdm(iterator, desc="Evolving")

        for _ in iterator:
            self.step()

            if callback is not None and self.generation % callback_interval == 0:
                callback(self)

        return self.grid
