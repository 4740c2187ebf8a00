"""
Configuration dataclass for InkVerify runs.

Grid dimensions, generation target and rule are run-invariant: they are never
derived from credentials and must match between the party that produced a
lock and the party verifying it.
"""

from dataclasses import dataclass, asdict
from typing import Any

from .errors import ConfigurationError
from .rules import RULES, DEFAULT_RULE

# Ceiling on width * height. Two uint8 buffers at this size take 32 MiB.
MAX_CELLS = 1 << 24

# Ceiling on the work factor.
MAX_GENERATIONS = 1_000_000


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class Config:
    """
    Complete configuration for one lock derivation.

    Attributes:
        width: Grid width in cells
        height: Grid height in cells
        generations: Generation target (the work factor)
        rule: Name of the update rule in the rule registry
        require_nonempty: Reject empty credential parts
    """

    width: int = 256
    height: int = 256
    generations: int = 1000
    rule: str = DEFAULT_RULE
    require_nonempty: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        self._validate()

    def _validate(self) -> None:
        """Check that all parameters are in valid ranges."""
        if not _is_int(self.width) or self.width <= 0:
            raise ConfigurationError(f"width must be a positive integer, got {self.width!r}")

        if not _is_int(self.height) or self.height <= 0:
            raise ConfigurationError(f"height must be a positive integer, got {self.height!r}")

        if self.width * self.height > MAX_CELLS:
            raise ConfigurationError(
                f"grid of {self.width}x{self.height} exceeds the {MAX_CELLS} cell ceiling"
            )

        if not _is_int(self.generations) or self.generations < 0:
            raise ConfigurationError(
                f"generations must be a non-negative integer, got {self.generations!r}"
            )

        if self.generations > MAX_GENERATIONS:
            raise ConfigurationError(
                f"generations must be <= {MAX_GENERATIONS}, got {self.generations}"
            )

        if self.rule not in RULES:
            raise ConfigurationError(f"rule must be one of {sorted(RULES)}, got {self.rule!r}")

    @property
    def shape(self) -> tuple[int, int]:
        """Grid array shape (H, W)."""
        return (self.height, self.width)

    @property
    def cells(self) -> int:
        return self.width * self.height

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "Config":
        """Create config from dictionary."""
        return cls(**d)

    @classmethod
    def from_args(cls, args: Any) -> "Config":
        """Create config from argparse namespace."""
        # Extract only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        config_dict = {k: v for k, v in vars(args).items() if k in known_fields and v is not None}
        return cls(**config_dict)

    def __repr__(self) -> str:
        return (
            f"Config(width={self.width}, height={self.height}, "
            f"generations={self.generations}, rule={self.rule!r})"
        )
