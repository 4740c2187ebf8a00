"""
Versioned update rules for the InkVerify automaton.

Both rules use Conway's survival/birth counts over the 8 toroidal neighbors.
The default rule folds in the previous generation (Fredkin's second-order
construction), which makes every generation invertible:

    next = life(current) XOR previous
    previous = life(current) XOR next

The only fixed point of the second-order rule is the all-dead pair, so cells
keep toggling for the whole generation target instead of freezing into still
lifes and blinkers the way first-order Life does on small tori.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .errors import ConfigurationError

DEFAULT_RULE = "life-xor"

# Offsets of the 8 Moore neighbors as (dy, dx)
NEIGHBOR_OFFSETS = tuple(
    (dy, dx)
    for dy in (-1, 0, 1)
    for dx in (-1, 0, 1)
    if not (dy == 0 and dx == 0)
)


def neighbor_count(cells: np.ndarray) -> np.ndarray:
    """
    Count alive neighbors of every cell with toroidal wraparound.

    Args:
        cells: Cell states {0, 1} [H, W]

    Returns:
        Neighbor counts in [0, 8] [H, W]
    """
    counts = np.zeros(cells.shape, dtype=np.uint8)
    for dy, dx in NEIGHBOR_OFFSETS:
        # roll by -d brings cell (y + dy, x + dx) to (y, x)
        counts += np.roll(cells, shift=(-dy, -dx), axis=(0, 1))
    return counts


@dataclass(frozen=True)
class Rule:
    """
    A life-like rule with an optional dependency on the previous generation.

    Attributes:
        name: Registry key
        version: Bumped whenever the outcome of the rule changes
        order: 1 for first-order rules, 2 for rules that XOR in the previous generation
        birth: Neighbor counts that turn a dead cell alive
        survive: Neighbor counts that keep an alive cell alive
    """

    name: str
    version: int
    order: int = 1
    birth: frozenset = frozenset({3})
    survive: frozenset = frozenset({2, 3})
    table: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # table[state, neighbors] -> outcome
        table = np.zeros((2, 9), dtype=np.uint8)
        for n in self.birth:
            table[0, n] = 1
        for n in self.survive:
            table[1, n] = 1
        table.flags.writeable = False
        object.__setattr__(self, "table", table)

    def apply(self, current: np.ndarray, previous: Optional[np.ndarray] = None) -> np.ndarray:
        """
        Compute the next generation.

        Args:
            current: Cell states of the current generation [H, W]
            previous: Cell states of the previous generation, order-2 rules only

        Returns:
            New array of next-generation cell states [H, W]
        """
        nxt = self.table[current, neighbor_count(current)]
        if self.order == 2:
            nxt ^= previous
        return nxt


def next_cell_state(rule: Rule, alive: int, neighbors: int, previous: int = 0) -> int:
    """Scalar form of Rule.apply for a single cell."""
    state = int(rule.table[alive, neighbors])
    if rule.order == 2:
        state ^= previous
    return state


RULES: dict[str, Rule] = {
    "life": Rule(name="life", version=1, order=1),
    "life-xor": Rule(name="life-xor", version=2, order=2),
}


def get_rule(name: str) -> Rule:
    """Look up a rule by name."""
    try:
        return RULES[name]
    except KeyError:
        raise ConfigurationError(f"rule must be one of {sorted(RULES)}, got {name!r}") from None
