class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when a leave request clashes with an existing active leave."""


class InsufficientBalanceError(DomainError):
    """Raised when a capped leave type does not have enough days left."""


class NotFoundError(DomainError):
    """Raised when a referenced leave, balance or employee does not exist."""


class InvalidStateError(DomainError):
    """Raised when a transition is attempted from a non-pending leave."""


class AuthenticationError(DomainError):
    """Raised when no signed-in user is attached to the request."""


class ForbiddenError(DomainError):
    """Raised when a user lacks permission for an action."""


class StoreError(Exception):
    """Raised when the backing row store fails (connection, SQL, serialization)."""
