"""
Exception taxonomy for InkVerify.

Configuration problems are raised at construction, input problems before any
grid work begins. Nothing is raised mid-run.
"""


class InkVerifyError(Exception):
    """Base class for all InkVerify errors."""


class ConfigurationError(InkVerifyError, ValueError):
    """Invalid grid dimensions, generation target or rule."""


class InvalidInputError(InkVerifyError, ValueError):
    """Empty or malformed credential parts."""
