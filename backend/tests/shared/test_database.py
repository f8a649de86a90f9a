"""Tests for shared/database.py."""

import pytest
from unittest.mock import patch, MagicMock

from shared.config import Settings
from shared.database import get_supabase_client, reset_client_cache


class TestSupabaseClient:
    def setup_method(self):
        """Reset cache before each test."""
        reset_client_cache()

    @patch("shared.database.create_client")
    def test_get_supabase_client_creates_client(self, mock_create):
        """Should create client with the anon key."""
        mock_create.return_value = MagicMock()
        settings = Settings(supabase_url="https://test.supabase.co", supabase_anon_key="test-key")

        client = get_supabase_client(settings)

        mock_create.assert_called_once_with("https://test.supabase.co", "test-key")
        assert client is mock_create.return_value

    @patch("shared.database.create_client")
    def test_get_supabase_client_is_cached(self, mock_create):
        """Should return the same client on subsequent calls."""
        mock_create.return_value = MagicMock()
        settings = Settings(supabase_url="https://test.supabase.co", supabase_anon_key="test-key")

        first = get_supabase_client(settings)
        second = get_supabase_client(settings)

        assert first is second
        mock_create.assert_called_once()

    def test_get_supabase_client_without_credentials(self):
        """Should raise when credentials are missing."""
        settings = Settings(supabase_url="", supabase_anon_key="")
        with pytest.raises(RuntimeError, match="Supabase configuration missing"):
            get_supabase_client(settings)

    @patch("shared.database.create_client")
    def test_reset_client_cache(self, mock_create):
        mock_create.side_effect = [MagicMock(), MagicMock()]
        settings = Settings(supabase_url="https://test.supabase.co", supabase_anon_key="test-key")

        first = get_supabase_client(settings)
        reset_client_cache()
        second = get_supabase_client(settings)

        assert first is not second
