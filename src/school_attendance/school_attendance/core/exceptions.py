class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a record does not exist or is outside the caller's scope.

    Both cases raise the same error so callers cannot probe for existence.
    """


class InvalidStateError(DomainError):
    """Raised when a record is not in a state that allows the operation."""


class StorageUnavailableError(DomainError):
    """Raised when the database cannot serve the request. Retryable."""
