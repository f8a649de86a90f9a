"""
Authentication module interface.

Other modules should depend on IAuthService, not the concrete implementation.
This keeps the emulator swappable for a hosted auth client in tests.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from .models import (
    AuthResponse,
    AuthStateCallback,
    AuthSubscription,
    OAuthResponse,
    SessionResponse,
    TokenValidationResponse,
    UserResponse,
)


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    Every operation returns a result model; failures are reported
    through its ``error`` field rather than raised.
    """

    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        data: Optional[dict[str, Any]] = None,
    ) -> AuthResponse:
        """
        Register a user and start a session.

        Args:
            email: Email address
            password: Plain password
            data: Optional user metadata

        Returns:
            AuthResponse with user and session, or an error
        """
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        ...

    async def sign_out(self) -> AuthResponse:
        ...

    async def get_session(self) -> SessionResponse:
        """Return the current session, or None once it has expired."""
        ...

    async def get_user(self) -> UserResponse:
        ...

    async def reset_password_for_email(
        self, email: str, redirect_to: Optional[str] = None
    ) -> AuthResponse:
        ...

    async def update_user(self, attributes: dict[str, Any]) -> AuthResponse:
        ...

    async def sign_in_with_oauth(
        self,
        provider: str,
        *,
        redirect_to: Optional[str] = None,
        scopes: Optional[str] = None,
        skip_browser_redirect: bool = False,
    ) -> OAuthResponse:
        ...

    async def on_auth_state_change(self, callback: AuthStateCallback) -> AuthSubscription:
        """
        Register a listener.

        The listener is called once with the current state before
        the subscription is returned.
        """
        ...

    async def start_auto_refresh(self) -> None:
        ...

    async def stop_auto_refresh(self) -> None:
        ...

    async def validate_token(self, token: str) -> TokenValidationResponse:
        """
        Validate an access token and return the authenticated user.

        Args:
            token: JWT access token

        Returns:
            TokenValidationResponse with the user when valid
        """
        ...
