"""
Authentication module.

Emulated users, sessions, OAuth handshakes and token validation.

Public API:
- IAuthService: Interface for auth operations
- AuthService: In-process emulator implementation
- User, Session, AuthResponse and the other result models
- Auth exceptions: InvalidCredentialsError, UserAlreadyExistsError, etc.
"""

from .interfaces import IAuthService
from .service import AuthService
from .identity import extract_name_from_email
from .models import (
    AuthChangeEvent,
    AuthenticatedUser,
    AuthResponse,
    AuthSubscription,
    JWTPayload,
    OAuthProvider,
    OAuthResponse,
    PendingOAuthState,
    Session,
    SessionResponse,
    StoredUser,
    TokenValidationResponse,
    User,
    UserResponse,
)
from .exceptions import (
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidEmailError,
    InvalidOtpError,
    InvalidTokenError,
    MissingTokenError,
    NoPendingOAuthError,
    NoSessionToRefreshError,
    NotAuthenticatedError,
    UnsupportedOAuthProviderError,
    UserAlreadyExistsError,
    UserNotFoundError,
    WeakPasswordError,
)

__all__ = [
    # Interface
    "IAuthService",
    # Implementation
    "AuthService",
    "extract_name_from_email",
    # Models
    "AuthChangeEvent",
    "AuthenticatedUser",
    "AuthResponse",
    "AuthSubscription",
    "JWTPayload",
    "OAuthProvider",
    "OAuthResponse",
    "PendingOAuthState",
    "Session",
    "SessionResponse",
    "StoredUser",
    "TokenValidationResponse",
    "User",
    "UserResponse",
    # Exceptions
    "ExpiredTokenError",
    "InvalidCredentialsError",
    "InvalidEmailError",
    "InvalidOtpError",
    "InvalidTokenError",
    "MissingTokenError",
    "NoPendingOAuthError",
    "NoSessionToRefreshError",
    "NotAuthenticatedError",
    "UnsupportedOAuthProviderError",
    "UserAlreadyExistsError",
    "UserNotFoundError",
    "WeakPasswordError",
]
