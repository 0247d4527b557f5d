class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced document does not exist."""


class StoreError(Exception):
    """Raised when the backing document store fails a read or write."""


class AlreadyExistsError(StoreError):
    """Raised when a create-if-absent write finds the document already there."""
