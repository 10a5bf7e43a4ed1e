"""Custom exceptions for the container ledger system."""
from typing import Any, Dict, Optional


class LedgerException(Exception):
    """Base exception for container ledger errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(LedgerException):
    """Raised when a referenced container, vendor, transfer or item does not exist."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, {"resource": resource, "id": resource_id})
        self.resource = resource
        self.resource_id = resource_id


class ForbiddenError(LedgerException):
    """Raised when the principal is neither the owner nor a manager."""
    pass


class InvalidInputError(LedgerException):
    """Raised when input data fails validation."""
    pass


# Older call sites use the shorter name
ValidationError = InvalidInputError


class ConflictingStateError(LedgerException):
    """Raised when an operation conflicts with the current stored state."""
    pass


class DuplicateBusinessCodeError(ConflictingStateError):
    """Raised when a container code already exists for the same owner."""
    pass


class InvalidStatusTransitionError(ConflictingStateError):
    """Raised when a container status change is not in the transition table."""
    pass


class ContainerNotCompletedError(ConflictingStateError):
    """Raised when destination-market data is written for an incomplete container."""
    pass


class ContainerHasLedgerEntriesError(ConflictingStateError):
    """Raised when deleting a container still referenced by transfers or sales."""
    pass


class DocumentStorageError(LedgerException):
    """Raised when the document store fails to store or delete a file."""
    pass


class ConfigurationError(LedgerException):
    """Raised when configuration is invalid or missing."""
    pass


class DatabaseError(LedgerException):
    """Raised when database operations fail."""
    pass
