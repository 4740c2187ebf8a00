"""
Seed/digest pipeline for InkVerify.

credential parts -> seed -> bit stream -> initial grid -> N generations
-> packed final state -> lock

Credential encoding:
    Each part, in the given order, is written as a 4-byte big-endian length
    followed by its bytes (str parts are UTF-8 encoded). The seed is the
    SHA-256 digest of that encoding, so ("ab", "c") and ("a", "bc") never
    collide.

Final state serialization:
    Cells in raster order (row-major, origin top-left), 8 cells per byte,
    first cell in the most significant bit, last byte zero-padded.
"""

import hashlib
import hmac
import logging
from typing import Iterable, Union

import numpy as np

from .bitstream import BitStream
from .config import Config
from .engine import Engine
from .errors import ConfigurationError, InvalidInputError
from .grid import Grid
from .rules import DEFAULT_RULE

logger = logging.getLogger(__name__)

DIGEST_SIZE = 32

CredentialPart = Union[str, bytes]

# Stands in for the seed of malformed credentials so that verification
# still performs the full computation.
_DECOY_SEED = hashlib.sha256(b"inkverify/decoy-seed").digest()


def encode_credentials(parts: Iterable[CredentialPart], require_nonempty: bool = True) -> bytes:
    """
    Length-prefix and concatenate credential parts.

    Args:
        parts: Credential parts in a fixed order (e.g. username, password)
        require_nonempty: Reject empty parts

    Returns:
        Canonical byte encoding of the parts
    """
    if isinstance(parts, (str, bytes)):
        raise InvalidInputError("credential parts must be a sequence of parts, not a single value")

    try:
        parts = list(parts)
    except TypeError:
        raise InvalidInputError("credential parts must be an iterable of parts") from None

    chunks = []
    count = 0
    for part in parts:
        if isinstance(part, str):
            data = part.encode("utf-8")
        elif isinstance(part, (bytes, bytearray)):
            data = bytes(part)
        else:
            raise InvalidInputError(f"credential part {count} must be str or bytes")

        if require_nonempty and not data:
            raise InvalidInputError(f"credential part {count} is empty")

        chunks.append(len(data).to_bytes(4, "big"))
        chunks.append(data)
        count += 1

    if count == 0:
        raise InvalidInputError("at least one credential part is required")

    return b"".join(chunks)


def derive_seed(parts: Iterable[CredentialPart], require_nonempty: bool = True) -> bytes:
    """SHA-256 seed of the encoded credential parts."""
    return hashlib.sha256(encode_credentials(parts, require_nonempty)).digest()


def build_grid(seed: bytes, config: Config) -> Grid:
    """
    Create a grid filled from the seed's bit stream.

    Args:
        seed: 32-byte seed
        config: Run configuration

    Returns:
        Grid with current filled one bit per cell in raster order
    """
    grid = Grid(config.width, config.height)
    stream = BitStream.from_seed(seed)
    grid.fill(stream.read_bits(config.cells))
    return grid


def serialize_grid(grid: Grid) -> bytes:
    """Pack the current generation into bytes in raster order, MSB-first."""
    return np.packbits(grid.current.ravel(), bitorder="big").tobytes()


def digest_state(data: bytes) -> bytes:
    """Hash a serialized final state into a lock."""
    return hashlib.sha256(data).digest()


def evolve(seed: bytes, config: Config, show_progress: bool = False) -> Grid:
    """Build the initial grid from a seed and run it to the generation target."""
    grid = build_grid(seed, config)
    return Engine(config, grid).run(show_progress=show_progress)


def derive_lock(
    credential_parts: Iterable[CredentialPart],
    grid_width: int,
    grid_height: int,
    generation_target: int,
    *,
    rule: str = DEFAULT_RULE,
    require_nonempty: bool = True,
    show_progress: bool = False,
) -> bytes:
    """
    Derive the lock of a credential.

    Deterministic: the same inputs always give the same lock.

    Args:
        credential_parts: Credential parts in a fixed order
        grid_width: Grid width in cells
        grid_height: Grid height in cells
        generation_target: Number of generations (the work factor)
        rule: Update rule name
        require_nonempty: Reject empty credential parts
        show_progress: Whether to show progress bar

    Returns:
        DIGEST_SIZE raw bytes

    Raises:
        ConfigurationError: Invalid dimensions, generation target or rule
        InvalidInputError: Malformed credential parts
    """
    config = Config(
        width=grid_width,
        height=grid_height,
        generations=generation_target,
        rule=rule,
        require_nonempty=require_nonempty,
    )
    seed = derive_seed(credential_parts, config.require_nonempty)

    grid = evolve(seed, config, show_progress=show_progress)
    return digest_state(serialize_grid(grid))


def verify_lock(
    candidate_credential_parts: Iterable[CredentialPart],
    grid_width: int,
    grid_height: int,
    generation_target: int,
    expected_digest: bytes,
    *,
    rule: str = DEFAULT_RULE,
    require_nonempty: bool = True,
) -> bool:
    """
    Check a candidate credential against a stored lock.

    Never raises. Malformed credentials run the same computation as a wrong
    credential and return False.

    Returns:
        True only if the recomputed lock matches expected_digest
    """
    try:
        config = Config(
            width=grid_width,
            height=grid_height,
            generations=generation_target,
            rule=rule,
            require_nonempty=require_nonempty,
        )
    except ConfigurationError as e:
        logger.debug("Rejecting verification with invalid parameters: %s", e)
        return False

    valid = True
    try:
        seed = derive_seed(candidate_credential_parts, config.require_nonempty)
    except InvalidInputError:
        seed = _DECOY_SEED
        valid = False

    actual = digest_state(serialize_grid(evolve(seed, config)))

    try:
        expected = bytes(memoryview(expected_digest))
    except TypeError:
        return False

    matched = hmac.compare_digest(actual, expected)
    return matched and valid
