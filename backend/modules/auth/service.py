"""
Authentication service implementation.

Emulates a hosted auth provider: users, the single current session,
auth-state listeners, simulated OAuth handshakes and token refresh.
Sessions carry HS256 access tokens that validate_token can verify.
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Optional
from urllib.parse import quote

import jwt
from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings, get_settings
from shared.faults import FaultInjector
from shared.ids import generate_token
from shared.latency import AUTH_DELAY_MS, SIGN_OUT_DELAY_MS, Latency
from shared.models import utc_now_iso
from shared.persistence import EmulatorPersistence

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
from .identity import build_user, provider_identity
from .models import (
    AuthChangeEvent,
    AuthenticatedUser,
    AuthResponse,
    AuthStateCallback,
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

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
SUPPORTED_PROVIDERS = {p.value for p in OAuthProvider}


class AuthService:
    """
    Auth session manager.

    Users are keyed by email. Exactly one current session is tracked;
    any read that finds it expired clears it and emits SIGNED_OUT.
    """

    def __init__(
        self,
        persistence: EmulatorPersistence,
        settings: Optional[Settings] = None,
        latency: Optional[Latency] = None,
        faults: Optional[FaultInjector] = None,
    ):
        self._settings = settings or get_settings()
        self._persistence = persistence
        self._latency = latency or Latency(self._settings)
        self._faults = faults or FaultInjector()

        self._users: dict[str, StoredUser] = {}
        self._session: Optional[Session] = None
        self._listeners: list[AuthSubscription] = []
        self._pending_oauth: Optional[PendingOAuthState] = None
        self._background: set[asyncio.Task] = set()
        self._refresh_task: Optional[asyncio.Task] = None
        self._hydrated = False
        self._hydrate_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # State and persistence
    # -------------------------------------------------------------------------

    async def hydrate(self) -> None:
        """Restore session and users from the key-value store once."""
        if self._hydrated:
            return
        async with self._hydrate_lock:
            if self._hydrated:
                return

            saved_session = await self._persistence.load_session()
            if saved_session:
                try:
                    session = Session.model_validate(saved_session)
                except PydanticValidationError:
                    logger.error("[Auth] Discarding unreadable persisted session", exc_info=True)
                    session = None
                if session and session.is_valid():
                    self._session = session
                    logger.debug(f"[Auth] Restored session for {session.user.email}")
                else:
                    await self._persistence.remove_session()
                    logger.debug("[Auth] Persisted session expired, removed")

            for pair in await self._persistence.load_users() or []:
                try:
                    email, data = pair
                    self._users[email] = StoredUser.model_validate(data)
                except (TypeError, ValueError):
                    logger.error("[Auth] Skipping unreadable persisted user", exc_info=True)
            if self._users:
                logger.debug(f"[Auth] Restored {len(self._users)} users")

            self._hydrated = True

    async def _persist_users(self) -> None:
        pairs = [[email, stored.model_dump(mode="json")] for email, stored in self._users.items()]
        await self._persistence.save_users(pairs)

    def _issue_session(self, user: User) -> Session:
        """Create a fresh session with a signed access token."""
        ttl = self._settings.emulator_session_ttl
        now = int(time.time())
        payload = {
            "sub": user.id,
            "email": user.email,
            "aud": "authenticated",
            "role": user.role,
            "iat": now,
            "exp": now + ttl,
            "session_id": uuid.uuid4().hex,
        }
        access_token = jwt.encode(payload, self._settings.supabase_jwt_secret, algorithm="HS256")
        return Session(
            access_token=access_token,
            refresh_token=generate_token("refresh"),
            expires_in=ttl,
            expires_at=now + ttl,
            user=user,
        )

    async def _start_session(self, user: User, event: AuthChangeEvent) -> Session:
        session = self._issue_session(user)
        self._session = session
        await self._persistence.save_session(session.model_dump(mode="json"))
        self._notify(event, session)
        return session

    async def _end_session(self) -> None:
        self._session = None
        await self._persistence.remove_session()
        self._notify(AuthChangeEvent.SIGNED_OUT, None)

    async def _current_valid_session(self) -> Optional[Session]:
        """Return the current session, clearing it first if it has expired."""
        if self._session and not self._session.is_valid():
            logger.debug(f"[Auth] Session for {self._session.user.email} expired")
            await self._end_session()
        return self._session

    def _notify(self, event: AuthChangeEvent, session: Optional[Session]) -> None:
        for subscription in list(self._listeners):
            self._call_listener(subscription.callback, event, session)

    @staticmethod
    def _call_listener(
        callback: AuthStateCallback, event: AuthChangeEvent, session: Optional[Session]
    ) -> None:
        try:
            callback(event, session)
        except Exception:
            logger.error(f"[Auth] Error in auth state listener for {event.value}", exc_info=True)

    def _find_by_id(self, user_id: str) -> Optional[StoredUser]:
        for stored in self._users.values():
            if stored.user.id == user_id:
                return stored
        return None

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # -------------------------------------------------------------------------
    # Email/password
    # -------------------------------------------------------------------------

    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        data: Optional[dict[str, Any]] = None,
    ) -> AuthResponse:
        """
        Register a new user and sign them in.

        Args:
            email: Email address, must contain "@"
            password: At least six characters
            data: Extra user metadata, merged over the derived name fields

        Returns:
            AuthResponse with the new user and session, or an error
        """
        await self.hydrate()
        await self._latency.wait(AUTH_DELAY_MS)
        logger.debug(f"[Auth] Sign up {email}")

        error = self._faults.get("auth", "sign_up")
        if error:
            return AuthResponse(error=error)
        if "@" not in email:
            return AuthResponse(error=InvalidEmailError(email))
        if len(password) < MIN_PASSWORD_LENGTH:
            return AuthResponse(error=WeakPasswordError(MIN_PASSWORD_LENGTH))
        if email in self._users:
            return AuthResponse(error=UserAlreadyExistsError(email))

        user = build_user(email, data)
        self._users[email] = StoredUser(email=email, password=password, user=user)
        await self._persist_users()

        session = await self._start_session(user, AuthChangeEvent.SIGNED_IN)
        return AuthResponse(user=user, session=session)

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        """Sign in with email and password."""
        await self.hydrate()
        await self._latency.wait(AUTH_DELAY_MS)
        logger.debug(f"[Auth] Sign in {email}")

        error = self._faults.get("auth", "sign_in")
        if error:
            return AuthResponse(error=error)

        stored = self._users.get(email)
        if stored is None or stored.password != password:
            return AuthResponse(error=InvalidCredentialsError())

        stored.user.last_sign_in_at = utc_now_iso()
        await self._persist_users()
        session = await self._start_session(stored.user, AuthChangeEvent.SIGNED_IN)
        return AuthResponse(user=stored.user, session=session)

    async def sign_out(self) -> AuthResponse:
        """Clear the current session. Only an injected fault can fail it."""
        await self.hydrate()
        await self._latency.wait(SIGN_OUT_DELAY_MS)
        logger.debug("[Auth] Sign out")

        error = self._faults.get("auth", "sign_out")
        if error:
            return AuthResponse(error=error)

        await self._end_session()
        return AuthResponse()

    async def get_session(self) -> SessionResponse:
        await self.hydrate()
        return SessionResponse(session=await self._current_valid_session())

    async def get_user(self) -> UserResponse:
        await self.hydrate()
        session = await self._current_valid_session()
        return UserResponse(user=session.user if session else None)

    async def reset_password_for_email(self, email: str, redirect_to: Optional[str] = None) -> AuthResponse:
        """Always succeeds, so callers cannot probe which emails exist."""
        await self.hydrate()
        await self._latency.wait(AUTH_DELAY_MS)
        logger.debug(f"[Auth] Password reset requested for {email} (redirect_to={redirect_to})")
        return AuthResponse()

    async def update_user(self, attributes: dict[str, Any]) -> AuthResponse:
        """
        Update the signed-in user.

        Args:
            attributes: Any of "email", "password" and "data" (metadata merge)
        """
        await self.hydrate()
        await self._latency.wait(AUTH_DELAY_MS)

        error = self._faults.get("auth", "update_user")
        if error:
            return AuthResponse(error=error)

        session = await self._current_valid_session()
        if session is None:
            return AuthResponse(error=NotAuthenticatedError())

        password = attributes.get("password")
        if password is not None and len(password) < MIN_PASSWORD_LENGTH:
            return AuthResponse(error=WeakPasswordError(MIN_PASSWORD_LENGTH))

        user = session.user
        new_email = attributes.get("email")
        if new_email and new_email != user.email and new_email in self._users:
            return AuthResponse(error=UserAlreadyExistsError(new_email))

        stored = self._find_by_id(user.id)

        if attributes.get("data"):
            user.user_metadata = {**user.user_metadata, **attributes["data"]}

        if new_email and new_email != user.email:
            if stored is not None:
                self._users.pop(stored.email, None)
                stored.email = new_email
                self._users[new_email] = stored
            user.email = new_email

        if stored is not None:
            if password is not None:
                stored.password = password
            stored.user = user
        user.updated_at = utc_now_iso()
        await self._persist_users()

        new_session = await self._start_session(user, AuthChangeEvent.USER_UPDATED)
        logger.debug(f"[Auth] User {user.id} updated")
        return AuthResponse(user=user, session=new_session)

    async def refresh_session(self) -> AuthResponse:
        """Issue a new session for the current user."""
        await self.hydrate()
        await self._latency.wait(AUTH_DELAY_MS)

        error = self._faults.get("auth", "refresh_session")
        if error:
            return AuthResponse(error=error)

        session = await self._current_valid_session()
        if session is None:
            return AuthResponse(error=NoSessionToRefreshError())

        refreshed = await self._start_session(session.user, AuthChangeEvent.TOKEN_REFRESHED)
        return AuthResponse(user=refreshed.user, session=refreshed)

    async def verify_otp(self, token: str, type: str = "email") -> AuthResponse:
        """
        Confirm an email address.

        Confirms the current user, or the first unconfirmed user when
        signed out, then signs that user in.
        """
        await self.hydrate()
        await self._latency.wait(AUTH_DELAY_MS)
        logger.debug(f"[Auth] Verify OTP ({type}) {token[:10]}")

        error = self._faults.get("auth", "verify_otp")
        if error:
            return AuthResponse(error=error)

        user: Optional[User] = None
        session = await self._current_valid_session()
        if session is not None:
            user = session.user
        else:
            for stored in self._users.values():
                if not stored.user.email_confirmed_at and not stored.user.confirmed_at:
                    user = stored.user
                    break

        if user is None:
            return AuthResponse(error=InvalidOtpError())

        confirmed_at = utc_now_iso()
        user.email_confirmed_at = confirmed_at
        user.confirmed_at = confirmed_at
        stored = self._users.get(user.email)
        if stored is not None:
            stored.user = user
            await self._persist_users()

        new_session = await self._start_session(user, AuthChangeEvent.SIGNED_IN)
        return AuthResponse(user=user, session=new_session)

    async def resend(self, type: str, email: str) -> AuthResponse:
        await self.hydrate()
        await self._latency.wait(AUTH_DELAY_MS)
        logger.debug(f"[Auth] Resend {type} email to {email}")
        if email not in self._users:
            return AuthResponse(error=UserNotFoundError(email))
        return AuthResponse()

    # -------------------------------------------------------------------------
    # OAuth
    # -------------------------------------------------------------------------

    @property
    def pending_oauth(self) -> Optional[PendingOAuthState]:
        return self._pending_oauth

    def cancel_pending_oauth(self) -> None:
        self._pending_oauth = None

    async def sign_in_with_oauth(
        self,
        provider: str,
        *,
        redirect_to: Optional[str] = None,
        scopes: Optional[str] = None,
        skip_browser_redirect: bool = False,
    ) -> OAuthResponse:
        """
        Start a simulated OAuth handshake.

        The handshake occupies the single pending slot, replacing any
        unfinished attempt. Unless skip_browser_redirect is set, it
        completes on its own after the configured OAuth delay.
        """
        await self.hydrate()
        logger.debug(f"[Auth] OAuth sign in with {provider}")

        error = self._faults.get("auth", "sign_in_with_oauth")
        if error:
            return OAuthResponse(error=error)
        if provider not in SUPPORTED_PROVIDERS:
            return OAuthResponse(error=UnsupportedOAuthProviderError(provider))

        state = generate_token("mock-state")
        self._pending_oauth = PendingOAuthState(provider=provider, state=state, redirect_to=redirect_to)
        url = (
            f"{self._settings.emulator_oauth_url}?provider={provider}"
            f"&state={state}&redirect_to={quote(redirect_to or '', safe='')}"
        )
        if scopes:
            url += f"&scopes={quote(scopes, safe='')}"
        logger.debug(f"[Auth] OAuth URL generated: {url}")

        if not skip_browser_redirect:
            self._spawn(self._complete_after_delay(provider, state))

        return OAuthResponse(provider=provider, url=url)

    async def _complete_after_delay(self, provider: str, state: str) -> None:
        await asyncio.sleep(self._latency.scaled(self._settings.emulator_oauth_delay))
        await self.complete_oauth_flow(provider, state)

    async def _sign_in_social(
        self, email: str, provider: str, metadata: dict[str, Any]
    ) -> tuple[User, Session]:
        stored = self._users.get(email)
        if stored is None:
            user = build_user(
                email,
                metadata,
                app_metadata={"provider": provider, "providers": [provider]},
            )
            # Social accounts have no password
            stored = StoredUser(email=email, password="", user=user)
            self._users[email] = stored
            await self._persist_users()

        self._pending_oauth = None
        session = await self._start_session(stored.user, AuthChangeEvent.SIGNED_IN)
        return stored.user, session

    async def complete_oauth_flow(self, provider: str, state: str) -> Optional[Session]:
        """
        Finish the handshake identified by ``state``.

        A state that does not match the pending slot is logged and
        ignored; the return value is then None.
        """
        pending = self._pending_oauth
        if pending is None or pending.state != state:
            logger.error(f"[Auth] OAuth state mismatch for {provider}")
            return None

        email, metadata = provider_identity(provider)
        user, session = await self._sign_in_social(email, provider, metadata)
        logger.debug(f"[Auth] OAuth flow completed for {user.email}")
        return session

    async def simulate_oauth_callback(self, custom_email: Optional[str] = None) -> AuthResponse:
        """Complete the pending handshake now, optionally as ``custom_email``."""
        await self.hydrate()
        pending = self._pending_oauth
        if pending is None:
            return AuthResponse(error=NoPendingOAuthError())

        if custom_email:
            user, session = await self._sign_in_social(
                custom_email,
                pending.provider,
                {"provider": pending.provider, "social_login": True},
            )
            return AuthResponse(user=user, session=session)

        session = await self.complete_oauth_flow(pending.provider, pending.state)
        return AuthResponse(user=session.user if session else None, session=session)

    # -------------------------------------------------------------------------
    # Listeners and refresh
    # -------------------------------------------------------------------------

    async def on_auth_state_change(self, callback: AuthStateCallback) -> AuthSubscription:
        """
        Register an auth state listener.

        The callback is invoked once before this returns, with SIGNED_IN
        and the session when one is valid, otherwise SIGNED_OUT.
        """
        await self.hydrate()
        session = await self._current_valid_session()

        subscription = AuthSubscription(callback, self._listeners)
        self._listeners.append(subscription)

        if session is not None:
            self._call_listener(callback, AuthChangeEvent.SIGNED_IN, session)
        else:
            self._call_listener(callback, AuthChangeEvent.SIGNED_OUT, None)
        return subscription

    async def refresh_if_needed(self) -> Optional[Session]:
        """Refresh when the session has under the threshold left but has not expired."""
        session = self._session
        if session is None:
            return None
        remaining = session.seconds_remaining()
        if 0 < remaining < self._settings.emulator_refresh_threshold:
            logger.debug(f"[Auth] Refreshing token ({remaining}s left)")
            return await self._start_session(session.user, AuthChangeEvent.TOKEN_REFRESHED)
        return None

    async def start_auto_refresh(self) -> None:
        """Check now, then keep checking on a background ticker."""
        await self.hydrate()
        await self.refresh_if_needed()
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.get_running_loop().create_task(self._auto_refresh_loop())

    async def _auto_refresh_loop(self) -> None:
        interval = self._settings.emulator_auto_refresh_interval
        while True:
            await asyncio.sleep(interval)
            try:
                await self.refresh_if_needed()
            except Exception:
                logger.error("[Auth] Auto refresh tick failed", exc_info=True)

    async def stop_auto_refresh(self) -> None:
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None

    @property
    def auto_refresh_running(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    async def validate_token(self, token: str) -> TokenValidationResponse:
        """
        Verify an access token issued by this emulator.

        Returns:
            TokenValidationResponse; invalid tokens carry an
            ExpiredTokenError, InvalidTokenError or MissingTokenError
        """
        if not token:
            return TokenValidationResponse(valid=False, error=MissingTokenError())

        try:
            payload = jwt.decode(
                token,
                self._settings.supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except jwt.ExpiredSignatureError:
            return TokenValidationResponse(valid=False, error=ExpiredTokenError())
        except jwt.InvalidTokenError as e:
            return TokenValidationResponse(valid=False, error=InvalidTokenError(str(e)))

        jwt_payload = JWTPayload(**payload)
        user = AuthenticatedUser(
            id=jwt_payload.sub,
            email=jwt_payload.email or "",
            role=jwt_payload.role if jwt_payload.role != "authenticated" else "user",
        )
        return TokenValidationResponse(valid=True, user=user)

    # -------------------------------------------------------------------------
    # Emulator control
    # -------------------------------------------------------------------------

    @property
    def current_session(self) -> Optional[Session]:
        """The current session without expiry checks."""
        return self._session

    def list_users(self) -> list[StoredUser]:
        return list(self._users.values())

    async def delete_user(self, user_id: str) -> bool:
        """
        Remove a user and end their session if it is current.

        Returns:
            True if a user was removed
        """
        await self.hydrate()
        stored = self._find_by_id(user_id)
        if stored is None:
            return False

        del self._users[stored.email]
        await self._persist_users()
        if self._session and self._session.user.id == user_id:
            await self._end_session()
        logger.debug(f"[Auth] Deleted user {user_id}")
        return True

    def reset(self) -> None:
        """Drop all in-memory state and cancel background work."""
        for task in list(self._background):
            task.cancel()
        self._background.clear()
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        self._users.clear()
        self._session = None
        self._listeners.clear()
        self._pending_oauth = None
        self._hydrated = False
