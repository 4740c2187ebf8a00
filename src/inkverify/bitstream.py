"""
Deterministic bit-stream generator for InkVerify.

Expands a 32-byte seed into a reproducible stream of bytes and bits using
xoshiro256**. The generator is not the source of cryptographic strength: the
seed already carries the full entropy of a SHA-256 digest.

Stream layout:
    - The seed is four little-endian 64-bit words of generator state
    - Each output word contributes 8 bytes, least significant byte first
    - Bits are unpacked MSB-first from each byte
"""

import logging

import numpy as np

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SEED_SIZE = 32

MASK_64 = 0xFFFFFFFFFFFFFFFF


def _rotl(x: int, k: int) -> int:
    return ((x << k) | (x >> (64 - k))) & MASK_64


def splitmix64(state: int) -> tuple[int, int]:
    """
    One step of splitmix64.

    Args:
        state: Current 64-bit state

    Returns:
        Tuple of (new_state, output)
    """
    state = (state + 0x9E3779B97F4A7C15) & MASK_64
    z = state
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & MASK_64
    return state, z ^ (z >> 31)


class BitStream:
    """
    Cursor over the pseudorandom stream of one seed.

    Each derivation constructs its own instance; instances are never shared
    between invocations.

    Attributes:
        state: Four 64-bit words of xoshiro256** state
        position: Number of bytes handed out so far
    """

    def __init__(self, state: tuple[int, int, int, int]):
        words = [w & MASK_64 for w in state]
        if len(words) != 4:
            raise ConfigurationError(f"xoshiro256** needs 4 state words, got {len(words)}")

        # All-zero state is a fixed point of the generator
        if not any(words):
            logger.debug("Remapping all-zero generator state through splitmix64")
            sm = 0
            for i in range(4):
                sm, words[i] = splitmix64(sm)

        self.state = words
        self.position = 0
        self._pending = b""

    @classmethod
    def from_seed(cls, seed: bytes) -> "BitStream":
        """Create a stream keyed by a 32-byte seed."""
        if not isinstance(seed, (bytes, bytearray)) or len(seed) != SEED_SIZE:
            raise ConfigurationError(f"seed must be {SEED_SIZE} bytes")

        words = tuple(
            int.from_bytes(seed[i:i + 8], "little") for i in range(0, SEED_SIZE, 8)
        )
        return cls(words)

    def next_u64(self) -> int:
        """Return the next 64-bit output word and advance the state."""
        s = self.state
        result = (_rotl((s[1] * 5) & MASK_64, 7) * 9) & MASK_64
        t = (s[1] << 17) & MASK_64

        s[2] ^= s[0]
        s[3] ^= s[1]
        s[1] ^= s[2]
        s[0] ^= s[3]
        s[2] ^= t
        s[3] = _rotl(s[3], 45)

        return result

    def read_bytes(self, n: int) -> bytes:
        """
        Read the next n bytes of the stream.

        Bytes left over from a partially consumed word are served first.
        """
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")

        out = bytearray(self._pending[:n])
        self._pending = self._pending[n:]

        words_needed = -(-(n - len(out)) // 8)
        chunk = b"".join(self.next_u64().to_bytes(8, "little") for _ in range(words_needed))

        missing = n - len(out)
        out += chunk[:missing]
        self._pending += chunk[missing:]

        self.position += n
        return bytes(out)

    def read_bits(self, n: int) -> np.ndarray:
        """
        Read n bits as a uint8 array of 0/1 values.

        Reads ceil(n / 8) whole bytes; trailing bits of the last byte are dropped.
        """
        data = np.frombuffer(self.read_bytes(-(-n // 8)), dtype=np.uint8)
        return np.unpackbits(data, bitorder="big")[:n]
