"""
Authentication module data models.

These models mirror the user/session shapes a hosted auth service returns,
so application code cannot tell the emulator from the real provider.
"""

import time
from enum import Enum
from typing import Any, Callable, Optional
from pydantic import BaseModel, Field

from shared.models import OperationResult, utc_now_iso


class AuthChangeEvent(str, Enum):
    """Events delivered to auth state listeners."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


class OAuthProvider(str, Enum):
    """OAuth providers the emulator can simulate."""

    GOOGLE = "google"
    APPLE = "apple"
    GITHUB = "github"
    TWITTER = "twitter"


class User(BaseModel):
    """User model matching the hosted auth schema."""

    id: str = Field(..., description="Opaque generated user ID")
    aud: str = Field(default="authenticated", description="Audience")
    role: str = Field(default="authenticated", description="Auth role")
    email: str = Field(..., description="Email address (user table key)")
    created_at: str = Field(default_factory=utc_now_iso, description="Creation time (ISO-8601)")
    updated_at: Optional[str] = Field(None, description="Last profile update")
    email_confirmed_at: Optional[str] = Field(None, description="When the email was confirmed")
    confirmed_at: Optional[str] = Field(None, description="When the account was confirmed")
    last_sign_in_at: Optional[str] = Field(None, description="Last successful sign-in")
    app_metadata: dict[str, Any] = Field(default_factory=dict)
    user_metadata: dict[str, Any] = Field(default_factory=dict)


class Session(BaseModel):
    """
    Credential session.

    Only one current session exists per emulator. It is valid while
    ``expires_at`` (epoch seconds) is strictly in the future.
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = 3600
    expires_at: int
    user: User

    def is_valid(self, now: Optional[float] = None) -> bool:
        """True while the session has not expired."""
        current = int(now if now is not None else time.time())
        return self.expires_at > current

    def seconds_remaining(self, now: Optional[float] = None) -> int:
        current = int(now if now is not None else time.time())
        return self.expires_at - current


class StoredUser(BaseModel):
    """
    Backing-table entry for a user.

    Passwords are kept in clear text: the emulator is a non-production
    test double and never runs when a real backend is configured.
    """

    email: str
    password: str
    user: User


class PendingOAuthState(BaseModel):
    """The single in-flight OAuth handshake."""

    provider: str
    state: str
    redirect_to: Optional[str] = None


class JWTPayload(BaseModel):
    """
    Decoded access token payload.

    Matches the claims of hosted auth JWTs plus the emulator session id.
    """

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    aud: str = Field(default="authenticated", description="Audience")
    role: str = Field(default="authenticated", description="User role")
    session_id: Optional[str] = Field(None, description="Emulator session id")


class AuthenticatedUser(BaseModel):
    """
    Minimal user info extracted from a validated access token.
    """

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")
    role: str = Field(default="user", description="User role")

    model_config = {"frozen": True}


# -----------------------------------------------------------------------------
# Operation results
# -----------------------------------------------------------------------------


class AuthResponse(OperationResult):
    """Result of sign-up, sign-in and other session-producing calls."""

    user: Optional[User] = None
    session: Optional[Session] = None


class SessionResponse(OperationResult):
    session: Optional[Session] = None


class UserResponse(OperationResult):
    user: Optional[User] = None


class OAuthResponse(OperationResult):
    """Synthetic authorization URL for an OAuth attempt."""

    provider: Optional[str] = None
    url: Optional[str] = None


class TokenValidationResponse(OperationResult):
    """Response from token validation."""

    valid: bool = Field(..., description="Whether the token is valid")
    user: Optional[AuthenticatedUser] = Field(None, description="User if valid")


AuthStateCallback = Callable[[AuthChangeEvent, Optional[Session]], Any]


class AuthSubscription:
    """Handle returned by on_auth_state_change."""

    def __init__(self, callback: AuthStateCallback, registry: list["AuthSubscription"]):
        self.callback = callback
        self._registry = registry

    @property
    def active(self) -> bool:
        return self in self._registry

    def unsubscribe(self) -> None:
        """Stop receiving events. Calling twice is a no-op."""
        if self in self._registry:
            self._registry.remove(self)
