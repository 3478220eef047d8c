"""
Error types for the noor content gateway
"""


class NoorError(Exception):
    """Base class for all noor errors."""


class MirrorUnavailableError(NoorError):
    """
    The local mirror could not be queried.

    This is the last tier of every read, so nothing can recover it;
    the API surfaces it as "temporarily unavailable".
    """


class SeedingError(NoorError):
    """A seeding job could not fetch or store its corpus."""


class InvalidReferenceError(NoorError, ValueError):
    """A content reference (e.g. ``2:255``) could not be parsed."""
