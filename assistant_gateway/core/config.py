"""
Core configuration module for the Assistant Gateway.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the
ASSISTANT_GATEWAY_ prefix.

Sampling parameters for model calls live here as static configuration; they are
never taken from the inbound request.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


DEFAULT_TOOL_PACKAGES = ["assistant_gateway.tools.builtin"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the ASSISTANT_GATEWAY_ prefix for environment variables.
    Example: ASSISTANT_GATEWAY_PORT=3000
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="assistant-gateway",
        description="Name of the service for logging and identification",
    )
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port the service listens on",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins outside development",
    )

    # =========================================================================
    # Model Provider
    # Pattern: SecretStr for sensitive values (masked in logs/repr)
    # =========================================================================
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="OpenAI API key",
    )
    openai_base_url: str | None = Field(
        default=None,
        description="Optional custom endpoint URL (proxies, compatible servers)",
    )
    openai_max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Attempts per model call; 1 disables provider-level retry",
    )
    default_model: str = Field(
        default="gpt-5-nano",
        description="Model used when the request does not name one",
    )
    use_fake_provider: bool = Field(
        default=False,
        description="Use the scripted fake provider instead of OpenAI",
    )

    # =========================================================================
    # Orchestration
    # =========================================================================
    turn_timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        le=600.0,
        description="Deadline for one complete conversation turn",
    )
    tool_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=300.0,
        description="Deadline for a single tool execution",
    )
    fallback_max_tokens: int = Field(
        default=1000,
        gt=0,
        description="Maximum answer length for the no-tools fallback call",
    )
    fallback_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for the no-tools fallback call",
    )

    # =========================================================================
    # Tool Discovery
    # =========================================================================
    tool_packages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TOOL_PACKAGES),
        description="Dotted package names scanned for tool modules at startup",
    )
    tool_directories: list[str] = Field(
        default_factory=list,
        description="Filesystem directories scanned for tool modules at startup",
    )

    # =========================================================================
    # Identity-scoped tools
    # =========================================================================
    google_api_base_url: str = Field(
        default="https://www.googleapis.com",
        description="Base URL of the Google REST APIs used by identity-scoped tools",
    )
    google_sheets_base_url: str = Field(
        default="https://sheets.googleapis.com",
        description="Base URL of the Google Sheets v4 API",
    )
    google_api_timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="Timeout for Google REST API calls",
    )

    model_config = {
        "env_prefix": "ASSISTANT_GATEWAY_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # =========================================================================
    # Field Validators
    # =========================================================================
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return level

    @field_validator("tool_packages")
    @classmethod
    def validate_tool_packages(cls, v: list[str]) -> list[str]:
        """Reject blank package names."""
        cleaned = [name.strip() for name in v]
        if any(not name for name in cleaned):
            raise ValueError("Tool package names must not be empty")
        return cleaned

    @property
    def has_openai_key(self) -> bool:
        """Whether an OpenAI API key is configured."""
        return bool(self.openai_api_key.get_secret_value())


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
