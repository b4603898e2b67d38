class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(ValidationError):
    """Raised when a unique value (visitor CIN, user email) is already taken."""


class AuthenticationError(DomainError):
    """Raised when credentials or the bearer token are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when the requested record does not exist."""


class StorageError(DomainError):
    """Raised when the database fails underneath a repository call."""


class ExportError(DomainError):
    """Raised when a PDF/CSV document cannot be rendered."""
