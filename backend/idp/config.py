"""Application configuration."""

import os
from functools import lru_cache
from typing import Mapping

from pydantic_settings import BaseSettings, SettingsConfigDict

from idp.auth.providers.base import DEFAULT_HTTP_TIMEOUT, ProviderConfig, ProviderId


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    environment: str = "development"  # development, staging, production

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Startup validation: strict, warn, skip
    startup_validation_level: str = "warn"

    # Per-call timeout for provider HTTP requests, in seconds
    oauth_http_timeout: float = DEFAULT_HTTP_TIMEOUT

    # Comma-separated allow-list of provider names (empty = every configured provider)
    oauth_enabled_providers: str = ""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def enabled_providers(self) -> set[str]:
        """Parsed allow-list of provider names."""
        return {
            item.strip().lower()
            for item in self.oauth_enabled_providers.split(",")
            if item.strip()
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def provider_configs_from_env(
    environ: Mapping[str, str] | None = None,
) -> dict[ProviderId, ProviderConfig]:
    """Build provider configurations from environment variables.

    Environment variable naming convention:
    - OAUTH_{PROVIDER}_CLIENT_ID
    - OAUTH_{PROVIDER}_CLIENT_SECRET
    - OAUTH_{PROVIDER}_DISPLAY_NAME (optional)

    A provider is included when either its client id or its client secret is
    set, so a half-configured provider is reported at startup instead of
    being silently left out.
    """
    if environ is None:
        environ = os.environ

    configs: dict[ProviderId, ProviderConfig] = {}
    for provider_id in ProviderId:
        prefix = f"OAUTH_{provider_id.value.upper()}_"
        client_id = environ.get(f"{prefix}CLIENT_ID", "").strip()
        client_secret = environ.get(f"{prefix}CLIENT_SECRET", "").strip()
        if not client_id and not client_secret:
            continue

        configs[provider_id] = ProviderConfig(
            client_id=client_id or None,
            client_secret=client_secret or None,
            display_name=environ.get(f"{prefix}DISPLAY_NAME", "").strip() or None,
        )

    return configs
