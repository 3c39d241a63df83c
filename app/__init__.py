"""
App package - Application configuration and core utilities.
Contains settings, exceptions, and foundational application code.
"""

from app.config import settings
from app.exceptions import (
    ServiceValidationError,
    InvalidShiftError,
    NotFoundError,
    UnknownTierError,
    ConflictError,
    SnapshotWriteError,
)

__all__ = [
    "settings",
    "ServiceValidationError",
    "InvalidShiftError",
    "NotFoundError",
    "UnknownTierError",
    "ConflictError",
    "SnapshotWriteError",
]
