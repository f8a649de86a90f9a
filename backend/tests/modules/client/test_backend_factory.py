import pytest
from unittest.mock import patch, MagicMock

from modules.client.factory import create_backend_client, uses_emulator
from modules.client.service import BaasClient, get_emulator_client


class TestBackendFactory:
    def test_uses_emulator_without_credentials(self, settings_factory):
        assert uses_emulator(settings_factory())

    def test_uses_hosted_backend_with_credentials(self, settings_factory):
        settings = settings_factory(supabase_url="https://x.supabase.co", supabase_anon_key="anon")
        assert not uses_emulator(settings)

    def test_force_emulator_wins(self, settings_factory):
        settings = settings_factory(
            supabase_url="https://x.supabase.co",
            supabase_anon_key="anon",
            force_emulator=True,
        )
        assert uses_emulator(settings)

    def test_explicit_settings_build_fresh_emulator(self, settings_factory):
        settings = settings_factory()
        first = create_backend_client(settings)
        second = create_backend_client(settings)

        assert isinstance(first, BaasClient)
        assert first is not second
        assert first.settings is settings

    def test_default_settings_return_singleton(self):
        with patch("modules.client.factory.get_settings") as mock_settings:
            mock_settings.return_value.force_emulator = False
            mock_settings.return_value.has_real_backend = False
            client = create_backend_client()
        assert client is get_emulator_client()

    @patch("modules.client.factory.get_supabase_client")
    def test_hosted_client_with_credentials(self, mock_get_client, settings_factory):
        mock_get_client.return_value = MagicMock()
        settings = settings_factory(supabase_url="https://x.supabase.co", supabase_anon_key="anon")

        client = create_backend_client(settings)

        assert client is mock_get_client.return_value
        mock_get_client.assert_called_once_with(settings)
