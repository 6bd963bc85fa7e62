"""
Tests for Settings.
"""

import pytest
from pydantic import ValidationError

from assistant_gateway.core.config import DEFAULT_TOOL_PACKAGES, Settings, get_settings


class TestDefaults:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ASSISTANT_GATEWAY_OPENAI_API_KEY", raising=False)

        settings = Settings()

        assert settings.service_name == "assistant-gateway"
        assert settings.port == 3000
        assert settings.default_model == "gpt-5-nano"
        assert settings.openai_max_attempts == 1
        assert settings.turn_timeout_seconds == 60.0
        assert settings.fallback_max_tokens == 1000
        assert settings.fallback_temperature == 0.7
        assert settings.tool_packages == DEFAULT_TOOL_PACKAGES
        assert settings.tool_directories == []
        assert settings.has_openai_key is False


class TestEnvironment:
    def test_reads_prefixed_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ASSISTANT_GATEWAY_PORT", "8080")
        monkeypatch.setenv("ASSISTANT_GATEWAY_OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("ASSISTANT_GATEWAY_TOOL_PACKAGES", '["my_tools"]')

        settings = Settings()

        assert settings.port == 8080
        assert settings.has_openai_key is True
        assert settings.tool_packages == ["my_tools"]

    def test_api_key_is_masked(self) -> None:
        settings = Settings(openai_api_key="sk-secret")

        assert "sk-secret" not in repr(settings)
        assert settings.openai_api_key.get_secret_value() == "sk-secret"


class TestValidation:
    def test_log_level_normalized(self) -> None:
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError, match="Log level must be one of"):
            Settings(log_level="verbose")

    @pytest.mark.parametrize("timeout", [0, -1, 601])
    def test_turn_timeout_bounds(self, timeout: float) -> None:
        with pytest.raises(ValidationError):
            Settings(turn_timeout_seconds=timeout)

    def test_blank_tool_package_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not be empty"):
            Settings(tool_packages=["ok", " "])


class TestGetSettings:
    def test_singleton(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
