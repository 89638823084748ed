class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when a write would break a uniqueness or state invariant."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    status_code = 404


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
