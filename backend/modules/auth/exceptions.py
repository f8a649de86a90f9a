"""
Authentication module exceptions.

Messages match the strings a hosted auth service reports, since
application code and tests compare against them.
"""

from shared.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


class InvalidEmailError(ValidationError):
    """Raised when an email address lacks an '@'."""

    def __init__(self, email: str = ""):
        super().__init__(
            "Invalid email address",
            code="INVALID_EMAIL",
            details={"email": email},
        )


class WeakPasswordError(ValidationError):
    """Raised when a password is shorter than the minimum length."""

    def __init__(self, min_length: int = 6):
        super().__init__(
            f"Password should be at least {min_length} characters",
            code="WEAK_PASSWORD",
            details={"min_length": min_length},
        )


class UserAlreadyExistsError(ConflictError):
    """Raised when signing up with an email that is already registered."""

    def __init__(self, email: str):
        super().__init__(
            "User already registered",
            code="USER_ALREADY_EXISTS",
            details={"email": email},
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised for unknown emails and wrong passwords alike."""

    def __init__(self):
        super().__init__("Invalid login credentials", code="INVALID_CREDENTIALS")


class NotAuthenticatedError(AuthenticationError):
    """Raised when an operation needs a current session."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, code="NOT_AUTHENTICATED")


class NoSessionToRefreshError(AuthenticationError):
    def __init__(self):
        super().__init__("No session to refresh", code="NO_SESSION")


class UnsupportedOAuthProviderError(ValidationError):
    """Raised when OAuth is requested for a provider outside the supported set."""

    def __init__(self, provider: str):
        super().__init__(
            f"Unsupported OAuth provider: {provider}",
            code="UNSUPPORTED_PROVIDER",
            details={"provider": provider},
        )


class NoPendingOAuthError(NotFoundError):
    def __init__(self):
        super().__init__("No pending OAuth flow", code="NO_PENDING_OAUTH")


class InvalidOtpError(AuthenticationError):
    def __init__(self):
        super().__init__("Invalid or expired token", code="INVALID_OTP")


class UserNotFoundError(NotFoundError):
    """Raised when an email has no registered user."""

    def __init__(self, email: str):
        super().__init__(
            "User not found",
            code="USER_NOT_FOUND",
            details={"email": email},
        )


class InvalidTokenError(AuthenticationError):
    """Raised when an access token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when an access token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no access token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")
