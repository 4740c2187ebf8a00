"""
Grid substrate for the InkVerify automaton.

The substrate holds exactly two equally-sized buffers:
- current: the generation being read
- next: the generation being written

Both have shape [H, W], dtype uint8, row-major with the origin at the top-left.
Coordinates wrap around in both directions (toroidal topology).
"""

import numpy as np

from .config import MAX_CELLS
from .errors import ConfigurationError


class Grid:
    """
    Double-buffered binary cell grid.

    Attributes:
        width: Number of columns
        height: Number of rows
        current: Cell states of the current generation [H, W]
        next: Cell states of the generation being written [H, W]
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"grid dimensions must be positive, got {width}x{height}")
        if width * height > MAX_CELLS:
            raise ConfigurationError(f"grid of {width}x{height} exceeds the {MAX_CELLS} cell ceiling")

        self.width = width
        self.height = height
        self.current = np.zeros((height, width), dtype=np.uint8)
        self.next = np.zeros((height, width), dtype=np.uint8)

    @property
    def shape(self) -> tuple[int, int]:
        """Grid dimensions (H, W)."""
        return self.current.shape

    @property
    def population(self) -> int:
        """Number of alive cells in the current generation."""
        return int(self.current.sum())

    def fill(self, bits: np.ndarray) -> None:
        """
        Fill the current buffer in raster order from a flat bit array.

        Args:
            bits: Exactly width * height values in {0, 1}
        """
        bits = np.asarray(bits, dtype=np.uint8)
        if bits.size != self.width * self.height:
            raise ConfigurationError(
                f"expected {self.width * self.height} bits to fill the grid, got {bits.size}"
            )
        self.current[...] = bits.reshape(self.height, self.width)

    def get(self, x: int, y: int) -> int:
        """Read a cell of the current generation, wrapping coordinates."""
        return int(self.current[y % self.height, x % self.width])

    def set_next(self, x: int, y: int, value: int) -> None:
        """Write a cell of the next generation, wrapping coordinates."""
        self.next[y % self.height, x % self.width] = 1 if value else 0

    def write_next(self, values: np.ndarray) -> None:
        """Write a whole generation into the next buffer."""
        if values.shape != self.next.shape:
            raise ConfigurationError(f"expected shape {self.next.shape}, got {values.shape}")
        np.copyto(self.next, values, casting="unsafe")

    def swap(self, clear: bool = True) -> None:
        """
        Promote next to current.

        The old current buffer becomes next. With clear=False it keeps the
        previous generation, which second-order rules read on the next step.
        """
        self.current, self.next = self.next, self.current
        if clear:
            self.next.fill(0)

    def clone(self) -> "Grid":
        """Create a deep copy of the grid."""
        other = Grid(self.width, self.height)
        other.current[...] = self.current
        other.next[...] = self.next
        return other
