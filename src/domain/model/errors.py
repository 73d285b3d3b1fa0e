"""Domain-level exceptions.

Services raise these errors to express authentication rule violations.
The session records their message in ``AuthState.error`` and re-raises them
to the caller; form controllers catch them and let the global error speak.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainError):
    """Input violates a field-level format rule.

    Handled entirely inside the form controllers; never reaches the session.
    """

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = field_errors
        super().__init__("Invalid form input")


class AuthenticationError(DomainError):
    """No registry entry matches the supplied credentials."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class DuplicateUserError(DomainError):
    """A user with the same email is already registered."""

    def __init__(self, email: str | None = None):
        self.email = email
        super().__init__("User already exists")


class StorageError(DomainError):
    """The underlying persistence medium is unavailable, full or corrupt."""
