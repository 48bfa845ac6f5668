"""OAuth Provider Registry.

Central registry for managing OAuth providers. Handles:
- Provider factory registration (which providers exist)
- Building configured instances (which providers this deployment uses)
- Provider lookup by id or machine name

The process-wide table is built once at startup by initialize_providers()
and is read-only afterwards.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from idp.auth.errors import OAuthProviderError
from idp.auth.providers.base import (
    OAuthProvider,
    ProviderConfig,
    ProviderFactory,
    ProviderId,
)
from idp.core.logging import get_logger, log_operation

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderInfo:
    """Display info for one configured provider (login page entry)."""

    id: ProviderId
    name: str
    display_name: str


@dataclass(frozen=True)
class ProviderBuildError:
    """A provider that was configured but could not be built."""

    name: str
    error: OAuthProviderError


def _lookup_key(key: ProviderId | str) -> str:
    if isinstance(key, ProviderId):
        return key.value
    return key.strip().lower()


class ProviderTable:
    """Read-only table of configured provider instances."""

    def __init__(
        self,
        providers: Iterable[OAuthProvider],
        errors: Iterable[ProviderBuildError] = (),
    ):
        by_name: dict[str, OAuthProvider] = {}
        for provider in providers:
            by_name[provider.name] = provider
        self._providers = MappingProxyType(by_name)
        self.errors: tuple[ProviderBuildError, ...] = tuple(errors)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, key: ProviderId | str) -> bool:
        return self.get(key) is not None

    def get(self, key: ProviderId | str) -> OAuthProvider | None:
        """Get a configured provider by ProviderId or machine name."""
        return self._providers.get(_lookup_key(key))

    def providers(self) -> list[OAuthProvider]:
        return list(self._providers.values())

    def list_registered(self) -> list[ProviderInfo]:
        """List configured providers with display info."""
        return [
            ProviderInfo(id=p.provider_id, name=p.name, display_name=p.display_name)
            for p in self._providers.values()
        ]


class ProviderRegistry:
    """Factories for every supported provider, keyed by id and machine name."""

    def __init__(self, factories: Iterable[ProviderFactory]):
        by_id: dict[ProviderId, ProviderFactory] = {}
        by_name: dict[str, ProviderFactory] = {}

        for factory in factories:
            if factory.id in by_id:
                raise ValueError(f"Duplicate OAuth provider id: {factory.id.value}")
            if factory.name in by_name:
                raise ValueError(f"Duplicate OAuth provider name: {factory.name}")
            by_id[factory.id] = factory
            by_name[factory.name] = factory

        self._by_id = MappingProxyType(by_id)
        self._by_name = MappingProxyType(by_name)

    def __len__(self) -> int:
        return len(self._by_id)

    def factories(self) -> list[ProviderFactory]:
        return list(self._by_id.values())

    def get(self, key: ProviderId | str) -> ProviderFactory | None:
        """Get a factory by ProviderId or machine name."""
        if isinstance(key, ProviderId):
            return self._by_id.get(key)
        return self._by_name.get(_lookup_key(key))

    def build(
        self,
        configs: Mapping[ProviderId | str, ProviderConfig],
        **options: Any,
    ) -> ProviderTable:
        """Build a provider table from per-provider configuration.

        Providers are built in registry order. A provider whose
        configuration is invalid is logged and left out; the remaining
        providers are still built.

        Args:
            configs: Configuration keyed by ProviderId or machine name
            **options: Passed to every factory (e.g. ``timeout``, ``transport``)

        Returns:
            Table of built providers plus the configuration errors encountered
        """
        resolved: dict[ProviderId, ProviderConfig] = {}
        for key, config in configs.items():
            factory = self.get(key)
            if factory is None:
                logger.warning("Ignoring configuration for unknown OAuth provider", provider=str(key))
                continue
            resolved[factory.id] = config

        providers: list[OAuthProvider] = []
        errors: list[ProviderBuildError] = []
        for factory in self._by_id.values():
            config = resolved.get(factory.id)
            if config is None:
                continue
            try:
                provider = factory.build(config, **options)
            except OAuthProviderError as e:
                logger.error(
                    "OAuth provider misconfigured",
                    provider=factory.name,
                    error=str(e),
                )
                errors.append(ProviderBuildError(name=factory.name, error=e))
                continue
            providers.append(provider)
            logger.info(f"Registered {factory.display_name} OAuth provider", provider=factory.name)

        return ProviderTable(providers, errors)


def default_registry() -> ProviderRegistry:
    """Registry of all built-in providers."""
    from idp.auth.providers.apple_provider import AppleProvider
    from idp.auth.providers.discord_provider import DiscordProvider
    from idp.auth.providers.facebook_provider import FacebookProvider
    from idp.auth.providers.github_provider import GitHubProvider
    from idp.auth.providers.gitlab_provider import GitLabProvider
    from idp.auth.providers.google_provider import GoogleProvider
    from idp.auth.providers.microsoft_provider import MicrosoftProvider

    return ProviderRegistry([
        AppleProvider.factory(),
        DiscordProvider.factory(),
        FacebookProvider.factory(),
        GitHubProvider.factory(),
        GitLabProvider.factory(),
        GoogleProvider.factory(),
        MicrosoftProvider.factory(),
    ])


# Process-wide provider table, set once at startup
_table: ProviderTable = ProviderTable([])


@log_operation("OAuth provider initialization")
def initialize_providers(
    configs: Mapping[ProviderId | str, ProviderConfig] | None = None,
    *,
    registry: ProviderRegistry | None = None,
    **options: Any,
) -> ProviderTable:
    """Initialize the process-wide provider table.

    Configuration defaults to OAUTH_{PROVIDER}_* environment variables.
    Only providers on the OAUTH_ENABLED_PROVIDERS allow-list are built when
    that setting is non-empty. The HTTP timeout defaults to
    OAUTH_HTTP_TIMEOUT.
    """
    global _table
    from idp.config import get_settings, provider_configs_from_env

    settings = get_settings()
    if configs is None:
        configs = provider_configs_from_env()
    if registry is None:
        registry = default_registry()

    enabled = settings.enabled_providers
    if enabled:
        configs = {k: v for k, v in configs.items() if _lookup_key(k) in enabled}

    options.setdefault("timeout", settings.oauth_http_timeout)
    _table = registry.build(configs, **options)

    logger.info(
        f"Initialized {len(_table)} OAuth providers",
        providers=[p.name for p in _table.providers()],
        failed=[e.name for e in _table.errors],
    )
    return _table


def get_provider(key: ProviderId | str) -> OAuthProvider | None:
    """Get a configured provider by ProviderId or machine name."""
    return _table.get(key)


def list_registered_providers() -> list[ProviderInfo]:
    """List configured providers with display info."""
    return _table.list_registered()


def reset_providers() -> None:
    """Clear the process-wide provider table (for testing)."""
    global _table
    _table = ProviderTable([])
