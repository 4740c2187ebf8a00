"""
InkVerify - memory-hard cellular automaton locks

Derives a large binary grid from a credential, evolves it through a fixed
cellular automaton rule and hashes the final state into a lock.
"""

__version__ = "0.1.0"

from .config import Config
from .errors import ConfigurationError, InkVerifyError, InvalidInputError
from .pipeline import DIGEST_SIZE, derive_lock, verify_lock

__all__ = [
    "Config",
    "ConfigurationError",
    "InkVerifyError",
    "InvalidInputError",
    "DIGEST_SIZE",
    "derive_lock",
    "verify_lock",
    "__version__",
]
