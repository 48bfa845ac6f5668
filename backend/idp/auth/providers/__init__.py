"""OAuth Provider Abstraction Layer.

Supports multiple identity providers for federated login:
- Apple (claims in the ID token)
- Discord, Facebook, GitHub, GitLab, Google, Microsoft (user info endpoint)
"""

from idp.auth.providers.base import (
    ClientSettings,
    Identity,
    OAuthProvider,
    ProviderConfig,
    ProviderFactory,
    ProviderId,
)
from idp.auth.providers.registry import (
    ProviderInfo,
    ProviderRegistry,
    ProviderTable,
    default_registry,
    get_provider,
    initialize_providers,
    list_registered_providers,
)

__all__ = [
    "ClientSettings",
    "Identity",
    "OAuthProvider",
    "ProviderConfig",
    "ProviderFactory",
    "ProviderId",
    "ProviderInfo",
    "ProviderRegistry",
    "ProviderTable",
    "default_registry",
    "get_provider",
    "initialize_providers",
    "list_registered_providers",
]
