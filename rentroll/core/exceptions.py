"""
Domain error taxonomy.

Every error carries the HTTP status the API layer maps it to, so the core
stays transport-agnostic while main.py can translate without a lookup table.
"""
from typing import Optional


class RentRollError(Exception):
    """Base class for all errors raised by the contract core."""

    status_code: int = 500
    kind: str = "error"

    def __init__(self, message: str, *, detail: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.kind, "detail": self.message}
        if self.detail:
            body["context"] = self.detail
        return body


class ValidationError(RentRollError):
    """Malformed or logically inconsistent input. Raised before any write."""

    status_code = 400
    kind = "validation_error"


class InvalidStateTransition(RentRollError):
    """Lifecycle operation attempted from a disallowed status."""

    status_code = 409
    kind = "invalid_state_transition"


class NotFound(RentRollError):
    """Entity missing, soft-deleted, or outside the caller's company."""

    status_code = 404
    kind = "not_found"


class ConcurrentModification(RentRollError):
    """Optimistic-lock version mismatch."""

    status_code = 409
    kind = "concurrent_modification"


class StorageError(RentRollError):
    """Document storage collaborator failure."""

    status_code = 502
    kind = "storage_error"


class PersistenceError(RentRollError):
    """Transport or transaction failure from the backing store."""

    status_code = 503
    kind = "persistence_error"
