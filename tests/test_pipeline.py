"""
Tests for the seed/digest pipeline.
"""

import hashlib

import numpy as np
import pytest

from inkverify.config import Config
from inkverify.errors import ConfigurationError, InvalidInputError
from inkverify.grid import Grid
from inkverify.pipeline import (
    DIGEST_SIZE,
    build_grid,
    derive_lock,
    derive_seed,
    digest_state,
    encode_credentials,
    serialize_grid,
    verify_lock,
)

ALICE = ("alice", "correct-horse")

# Produced by an independent implementation of the same encoding,
# generator, rule and serialization.
ALICE_SEED_HEX = "fbb47c1cc378b3e3fac38f8fa0582989a5963a4e492fe38dcef663bb1b0bc25f"
ALICE_LOCK_HEX = "27e98ff2f1198597705cf61e0db6d218b4234d14d92ad8eedeaf76559236cb05"
ALICE_LIFE_LOCK_HEX = "655b25a326a2389a283bd698f60f2c0fa9434547cbcf2d10bfeb16c6b2d9fb87"
ALICE_INITIAL_LOCK_HEX = "fa35711d1375bd094d4fa1f333f4f2838899cdf505e5372897f8ee9470d2f3ee"


class TestCredentialEncoding:
    """Tests for credential encoding and seed derivation."""

    def test_length_prefixed(self):
        """Each part is preceded by its 4-byte big-endian length."""
        assert encode_credentials(("ab", b"c")) == b"\x00\x00\x00\x02ab\x00\x00\x00\x01c"

    def test_unambiguous(self):
        """Shifting characters between parts changes the seed."""
        assert derive_seed(("ab", "c")) != derive_seed(("a", "bc"))

    def test_order_matters(self):
        """Parts are not interchangeable."""
        assert derive_seed(("alice", "pw")) != derive_seed(("pw", "alice"))

    def test_utf8(self):
        """str parts are UTF-8 encoded."""
        assert derive_seed(("josé", "pw")) == derive_seed(("josé".encode("utf-8"), b"pw"))

    def test_reference_seed(self):
        """Seed matches the pinned value."""
        assert derive_seed(ALICE).hex() == ALICE_SEED_HEX

    def test_empty_part_rejected(self):
        """Empty parts are rejected when required."""
        with pytest.raises(InvalidInputError, match="part 1"):
            derive_seed(("alice", ""))

    def test_empty_part_allowed(self):
        """Empty parts are accepted when the policy allows them."""
        seed = derive_seed(("alice", ""), require_nonempty=False)
        assert len(seed) == 32

    @pytest.mark.parametrize("parts", [(), ("alice", 42), ("alice", None), "alice", b"alice"])
    def test_malformed_parts(self, parts):
        """Missing parts, wrong types and bare strings are rejected."""
        with pytest.raises(InvalidInputError):
            encode_credentials(parts)


class TestSerialization:
    """Tests for grid serialization."""

    def test_raster_msb_first(self):
        """Cells are packed row-major, first cell in the high bit."""
        grid = Grid(4, 3)
        grid.current[0, 0] = 1
        grid.current[1, 3] = 1
        grid.current[2, 0] = 1

        # bits: 1000 0001 1000 -> 0x81, 0x80
        assert serialize_grid(grid) == b"\x81\x80"

    def test_length(self):
        """Length is ceil(W * H / 8)."""
        assert len(serialize_grid(Grid(5, 5))) == 4
        assert len(serialize_grid(Grid(1, 1))) == 1
        assert len(serialize_grid(Grid(16, 16))) == 32

    def test_initial_grid_matches_stream(self, seed):
        """The initial grid is the bit stream in raster order."""
        config = Config(width=16, height=16, generations=0)
        grid = build_grid(seed, config)

        from inkverify.bitstream import BitStream
        assert serialize_grid(grid) == BitStream.from_seed(seed).read_bytes(32)


class TestDeriveLock:
    """Tests for derive_lock."""

    def test_golden_value(self):
        """alice / correct-horse on 8x8 for 10 generations."""
        assert derive_lock(ALICE, 8, 8, 10).hex() == ALICE_LOCK_HEX

    def test_golden_value_life(self):
        """Same credential under the first-order rule."""
        assert derive_lock(ALICE, 8, 8, 10, rule="life").hex() == ALICE_LIFE_LOCK_HEX

    def test_zero_generations(self, seed):
        """A target of zero hashes the unevolved grid."""
        config = Config(width=8, height=8, generations=0)
        expected = digest_state(serialize_grid(build_grid(seed, config)))

        lock = derive_lock(ALICE, 8, 8, 0)

        assert lock == expected
        assert lock.hex() == ALICE_INITIAL_LOCK_HEX
        assert lock == hashlib.sha256(serialize_grid(build_grid(seed, config))).digest()

    def test_digest_size(self):
        """Locks are raw SHA-256 digests."""
        lock = derive_lock(ALICE, 16, 16, 5)
        assert isinstance(lock, bytes)
        assert len(lock) == DIGEST_SIZE

    def test_deterministic(self):
        """Same inputs give the same lock."""
        assert derive_lock(ALICE, 24, 16, 20) == derive_lock(ALICE, 24, 16, 20)

    def test_parameters_change_lock(self):
        """Dimensions, generations and rule all affect the lock."""
        base = derive_lock(ALICE, 16, 16, 10)

        assert derive_lock(ALICE, 16, 16, 11) != base
        assert derive_lock(ALICE, 32, 8, 10) != base
        assert derive_lock(ALICE, 16, 16, 10, rule="life") != base

    def test_degenerate_grid(self):
        """A 1x1 grid produces a lock."""
        assert len(derive_lock(ALICE, 1, 1, 5)) == DIGEST_SIZE

    def test_invalid_configuration(self):
        """Invalid dimensions raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            derive_lock(ALICE, 0, 8, 10)
        with pytest.raises(ConfigurationError):
            derive_lock(ALICE, 8, 8, -1)

    def test_configuration_checked_before_input(self):
        """Configuration errors win over input errors."""
        with pytest.raises(ConfigurationError):
            derive_lock(("", ""), 0, 0, 1)

    def test_invalid_input(self):
        """Empty credentials raise InvalidInputError."""
        with pytest.raises(InvalidInputError):
            derive_lock(("alice", ""), 8, 8, 10)

    @pytest.mark.parametrize("parts", [None, 42])
    def test_non_iterable_credentials(self, parts):
        """Credentials that are not an iterable raise InvalidInputError."""
        with pytest.raises(InvalidInputError, match="iterable"):
            derive_lock(parts, 8, 8, 10)

    def test_generator_credentials(self):
        """Any iterable of parts is accepted."""
        assert derive_lock(iter(ALICE), 8, 8, 10).hex() == ALICE_LOCK_HEX

    def test_avalanche(self):
        """Single-character edits flip about half of the lock bits."""
        flipped = 0
        total = 0
        for i in range(64):
            a = derive_lock((f"user{i}", "password"), 16, 16, 16)
            b = derive_lock((f"user{i}", "passwore"), 16, 16, 16)
            assert a != b

            diff = np.unpackbits(np.frombuffer(bytes(x ^ y for x, y in zip(a, b)), dtype=np.uint8))
            flipped += int(diff.sum())
            total += diff.size

        assert 0.45 < flipped / total < 0.55


class TestVerifyLock:
    """Tests for verify_lock."""

    def test_round_trip(self):
        """A derived lock verifies."""
        lock = derive_lock(ALICE, 16, 12, 25)
        assert verify_lock(ALICE, 16, 12, 25, lock) is True

    def test_wrong_credential(self):
        """A different password does not verify."""
        lock = derive_lock(ALICE, 16, 12, 25)
        assert verify_lock(("alice", "correct-horsf"), 16, 12, 25, lock) is False

    @pytest.mark.parametrize("width,height,generations", [
        (12, 16, 25), (16, 16, 25), (16, 12, 24), (16, 12, 0),
    ])
    def test_parameter_mismatch(self, width, height, generations):
        """Different dimensions or targets do not verify."""
        lock = derive_lock(ALICE, 16, 12, 25)
        assert verify_lock(ALICE, width, height, generations, lock) is False

    def test_rule_mismatch(self):
        """A lock made under another rule does not verify."""
        lock = derive_lock(ALICE, 16, 12, 25, rule="life")
        assert verify_lock(ALICE, 16, 12, 25, lock) is False

    @pytest.mark.parametrize("width,height,generations", [
        (0, 8, 10), (8, -1, 10), (8, 8, -5), (8.5, 8, 10),
    ])
    def test_invalid_parameters_return_false(self, width, height, generations):
        """Invalid parameters return False instead of raising."""
        lock = derive_lock(ALICE, 8, 8, 10)
        assert verify_lock(ALICE, width, height, generations, lock) is False

    @pytest.mark.parametrize("parts", [("alice", ""), (), ("alice", 7), None, 42])
    def test_malformed_credentials_return_false(self, parts):
        """Malformed credentials return False instead of raising."""
        lock = derive_lock(ALICE, 8, 8, 10)
        assert verify_lock(parts, 8, 8, 10, lock) is False

    @pytest.mark.parametrize("expected", [ALICE_LOCK_HEX, None, b"", b"\x00" * 32])
    def test_bad_expected_digest(self, expected):
        """Non-matching or non-bytes expected digests return False."""
        assert verify_lock(ALICE, 8, 8, 10, expected) is False

    def test_golden_verifies(self):
        """The pinned lock verifies from its hex form."""
        assert verify_lock(ALICE, 8, 8, 10, bytes.fromhex(ALICE_LOCK_HEX)) is True

    @pytest.mark.parametrize("wrap", [bytearray, memoryview])
    def test_buffer_expected_digest(self, wrap):
        """Stored locks may arrive as any bytes-like buffer."""
        lock = derive_lock(ALICE, 8, 8, 10)
        assert verify_lock(ALICE, 8, 8, 10, wrap(lock)) is True
