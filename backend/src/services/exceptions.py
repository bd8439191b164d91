"""
Exceptions raised by the identity service and the account store.

Every error carries an ``ErrorKind`` from a closed set and a message that is safe
to show to API callers. The underlying cause (a database error, a bcrypt failure)
travels on ``__cause__`` and is only ever logged. ``operation`` names the service
operation the error escaped from, for diagnostics.
"""
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from schemas.validators import FieldViolation


class ErrorKind(StrEnum):
    """Classification of identity errors, mapped to HTTP status at the API boundary."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


class IdentityError(Exception):
    """Base exception for account and authentication failures."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, operation: str | None = None) -> None:
        self.message = message or self.default_message
        self.operation = operation
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class ValidationFailedError(IdentityError):
    """Raised when account input fails validation."""

    kind = ErrorKind.VALIDATION
    default_message = "Invalid input"

    def __init__(
        self,
        violations: "list[FieldViolation]",
        operation: str | None = None,
    ) -> None:
        self.violations = violations
        super().__init__(operation=operation)


class EmailAlreadyExistsError(IdentityError):
    """Raised when an email is already registered to another account."""

    kind = ErrorKind.CONFLICT
    default_message = "User with given email already exists"


class InvalidCredentialsError(IdentityError):
    """
    Raised for any failed login.

    Unknown email and wrong password produce this same error so that callers
    cannot tell which emails are registered.
    """

    kind = ErrorKind.UNAUTHORIZED
    default_message = "Unauthorized"


class AccountNotFoundError(IdentityError):
    """Raised when no account has the requested identifier."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Account not found"


class InternalServiceError(IdentityError):
    """Raised for store, hashing, or token failures. Details stay in __cause__."""

    kind = ErrorKind.INTERNAL
