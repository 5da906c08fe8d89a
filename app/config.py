"""
Application Configuration - Pydantic Settings for type-safe config.

NO DICTIONARIES - All configuration is strongly typed.
FAIL FAST - Critical config is validated at startup.
"""

import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_title: str = "Creator Credits API"
    api_version: str = "0.1.0"
    api_description: str = "Credit metering for AI content generation"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    service_name: str = "creator-credits-api"

    # Generation collaborator (Gemini REST API)
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    strategy_model: str = "gemini-3-flash-preview"
    image_model: str = "gemini-2.5-flash-image"
    generation_timeout_seconds: float = 60.0

    # Admin role assignment
    admin_emails: str = ""  # Comma-separated list of emails granted ADMIN on first login
    admin_email_heuristic: bool = True  # Any email containing "admin" becomes ADMIN

    # Demo data (three creators and a few audit entries)
    seed_demo_data: bool = False

    # Where clients are sent when credits run out
    upgrade_url: str = "/v1/plans"

    # Default credit costs per feature
    cost_strategy_generation: int = 1
    cost_script_generation: int = 5
    cost_thumbnail_generation: int = 3
    cost_channel_analysis: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def admin_email_list(self) -> list[str]:
        """Get normalized list of explicitly configured admin emails."""
        emails = []
        for email in self.admin_emails.split(","):
            email = email.strip().lower()
            if email and email not in emails:
                emails.append(email)
        return emails

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate critical configuration at startup.

        The app MUST NOT start with a config that would only break at runtime.
        """
        errors: list[str] = []

        if self.log_format not in ("json", "console"):
            errors.append(f"LOG_FORMAT must be 'json' or 'console', got: {self.log_format}")

        if self.generation_timeout_seconds <= 0:
            errors.append(
                "GENERATION_TIMEOUT_SECONDS must be positive, "
                f"got: {self.generation_timeout_seconds}"
            )

        for name in (
            "cost_strategy_generation",
            "cost_script_generation",
            "cost_thumbnail_generation",
            "cost_channel_analysis",
        ):
            if getattr(self, name) < 0:
                errors.append(f"{name.upper()} must be non-negative, got: {getattr(self, name)}")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CRITICAL CONFIGURATION ERROR - APPLICATION CANNOT START",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings
