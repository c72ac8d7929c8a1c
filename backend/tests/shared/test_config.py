"""Tests for shared/config.py."""

import os
from unittest.mock import patch

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.app_name == "Mindcare API"
        assert settings.debug is False
        assert settings.port == 8000
        assert settings.storage_backend == "supabase"
        assert settings.invitation_ttl_days == 7
        assert settings.therapist_min_password_length == 8
        assert settings.patient_min_password_length == 6
        assert settings.orphan_grace_period_minutes == 60
        assert settings.hook_secret == ""

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {
            "DEBUG": "true",
            "STORAGE_BACKEND": "memory",
            "INVITATION_TTL_DAYS": "3",
            "INVITATION_BASE_URL": "https://mindcare.example.com/register",
        }):
            settings = Settings(_env_file=None)
        assert settings.debug is True
        assert settings.storage_backend == "memory"
        assert settings.invitation_ttl_days == 3
        assert settings.invitation_base_url == "https://mindcare.example.com/register"

    def test_loads_supabase_config_from_env(self):
        with patch.dict(os.environ, {
            "SUPABASE_URL": "https://test.supabase.co",
            "SUPABASE_SERVICE_ROLE_KEY": "service-key",
            "SUPABASE_JWT_SECRET": "jwt-secret",
        }):
            settings = Settings(_env_file=None)
        assert settings.supabase_url == "https://test.supabase.co"
        assert settings.supabase_service_role_key == "service-key"
        assert settings.supabase_jwt_secret == "jwt-secret"


class TestGetSettings:
    def test_returns_cached_instance(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
