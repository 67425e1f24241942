"""Error types shared by the stores and the persistence layer."""

from __future__ import annotations


class ValidationError(ValueError):
    """User-correctable input problem.

    Raised by the stores and converted to a message at the session boundary.
    """


class PersistenceError(RuntimeError):
    """Reading or writing the on-device document store failed."""
