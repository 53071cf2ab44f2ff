"""
Catalog error taxonomy.

Every failure crossing the catalog boundary is one of these. The menu
core decides what to keep or discard based on the type:

    ValidationError    staged edits kept, reason shown next to the field
    NotFoundError      entity is gone, staged edits for it are discarded
    ConflictError      operation aborted, explanation shown
    TransportError     staged edits kept, retry offered
    UnauthorizedError  privileged call without owner access
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog failures."""

    retryable = False

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(CatalogError):
    """Malformed or missing required field."""


class NotFoundError(CatalogError):
    """Entity does not exist (possibly deleted by another session)."""


class ConflictError(CatalogError):
    """Operation conflicts with current state, e.g. deleting a non-empty category."""


class TransportError(CatalogError):
    """Network or server failure."""

    retryable = True


class UnauthorizedError(CatalogError):
    """Privileged operation attempted without owner access."""
