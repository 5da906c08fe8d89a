"""
Tests for application settings.
"""

import pytest

from app.config import ConfigurationError, Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.cost_script_generation == 5
        assert settings.generation_timeout_seconds > 0
        assert settings.admin_email_heuristic is True

    def test_admin_email_list_normalized(self):
        settings = Settings(admin_emails=" Boss@Studio.io, ops@studio.io ,,boss@studio.io")

        assert settings.admin_email_list == ["boss@studio.io", "ops@studio.io"]

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("COST_CHANNEL_ANALYSIS", "15")
        monkeypatch.setenv("SEED_DEMO_DATA", "true")

        settings = Settings()

        assert settings.cost_channel_analysis == 15
        assert settings.seed_demo_data is True


class TestFailFast:
    def test_bad_log_format(self):
        with pytest.raises(ConfigurationError):
            Settings(log_format="xml")

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigurationError):
            Settings(generation_timeout_seconds=0)

    def test_negative_cost(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(cost_thumbnail_generation=-1)

        assert "COST_THUMBNAIL_GENERATION" in str(exc_info.value)
