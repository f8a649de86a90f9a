import asyncio
import pytest
from urllib.parse import parse_qs, urlparse

from modules.auth.service import AuthService
from modules.auth.models import AuthChangeEvent
from modules.auth.exceptions import NoPendingOAuthError, UnsupportedOAuthProviderError


class TestOAuthFlow:
    @pytest.fixture
    def service(self, persistence, settings, latency, faults):
        return AuthService(persistence, settings, latency, faults)

    @pytest.mark.asyncio
    async def test_url_contains_provider_state_and_redirect(self, service, settings):
        response = await service.sign_in_with_oauth(
            "github",
            redirect_to="https://app.example.com/callback?x=1",
            skip_browser_redirect=True,
        )

        assert response.ok
        assert response.provider == "github"
        assert response.url.startswith(settings.emulator_oauth_url)
        query = parse_qs(urlparse(response.url).query)
        assert query["provider"] == ["github"]
        assert query["state"] == [service.pending_oauth.state]
        assert query["redirect_to"] == ["https://app.example.com/callback?x=1"]

    @pytest.mark.asyncio
    async def test_unsupported_provider(self, service):
        response = await service.sign_in_with_oauth("myspace", skip_browser_redirect=True)

        assert isinstance(response.error, UnsupportedOAuthProviderError)
        assert response.error.message == "Unsupported OAuth provider: myspace"
        assert service.pending_oauth is None

    @pytest.mark.asyncio
    async def test_flow_completes_on_its_own(self, service):
        """Without skip_browser_redirect the handshake signs a user in after the delay."""
        events = []
        await service.on_auth_state_change(lambda event, session: events.append(event))

        await service.sign_in_with_oauth("google")
        await asyncio.sleep(0.05)

        session = service.current_session
        assert session is not None
        assert session.user.email.endswith("@gmail.com")
        assert session.user.app_metadata["provider"] == "google"
        assert session.user.user_metadata["social_login"] is True
        assert service.pending_oauth is None
        assert events[-1] == AuthChangeEvent.SIGNED_IN

    @pytest.mark.asyncio
    async def test_skip_browser_redirect_leaves_flow_pending(self, service):
        await service.sign_in_with_oauth("apple", skip_browser_redirect=True)
        await asyncio.sleep(0.05)

        assert service.current_session is None
        assert service.pending_oauth.provider == "apple"

    @pytest.mark.asyncio
    async def test_simulate_callback_with_custom_email(self, service):
        await service.sign_in_with_oauth("twitter", skip_browser_redirect=True)

        response = await service.simulate_oauth_callback("fan@example.com")

        assert response.user.email == "fan@example.com"
        assert response.user.app_metadata == {"provider": "twitter", "providers": ["twitter"]}
        assert service.pending_oauth is None

    @pytest.mark.asyncio
    async def test_simulate_callback_reuses_existing_user(self, service):
        await service.sign_in_with_oauth("google", skip_browser_redirect=True)
        first = await service.simulate_oauth_callback("fan@example.com")
        await service.sign_in_with_oauth("google", skip_browser_redirect=True)
        second = await service.simulate_oauth_callback("fan@example.com")

        assert first.user.id == second.user.id
        assert len(service.list_users()) == 1

    @pytest.mark.asyncio
    async def test_simulate_callback_without_pending_flow(self, service):
        response = await service.simulate_oauth_callback()
        assert isinstance(response.error, NoPendingOAuthError)

    @pytest.mark.asyncio
    async def test_state_mismatch_is_ignored(self, service):
        await service.sign_in_with_oauth("github", skip_browser_redirect=True)

        session = await service.complete_oauth_flow("github", "some-other-state")

        assert session is None
        assert service.current_session is None
        assert service.pending_oauth is not None

    @pytest.mark.asyncio
    async def test_new_attempt_replaces_pending_flow(self, service):
        await service.sign_in_with_oauth("github", skip_browser_redirect=True)
        stale_state = service.pending_oauth.state
        await service.sign_in_with_oauth("google", skip_browser_redirect=True)

        assert service.pending_oauth.provider == "google"
        assert await service.complete_oauth_flow("github", stale_state) is None

    @pytest.mark.asyncio
    async def test_cancel_pending_oauth(self, service):
        await service.sign_in_with_oauth("google")
        service.cancel_pending_oauth()
        await asyncio.sleep(0.05)

        assert service.pending_oauth is None
        assert service.current_session is None
