"""Base OAuth Provider Interface.

Defines the contract that all OAuth providers must implement, along with
the value types that flow across it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar

import httpx

from idp.auth.errors import InvalidConfigError, MissingConfigError

DEFAULT_HTTP_TIMEOUT = 10.0


class ProviderId(str, Enum):
    """Supported identity providers.

    The value is the stable, serializable machine name.
    """

    APPLE = "apple"
    DISCORD = "discord"
    FACEBOOK = "facebook"
    GITHUB = "github"
    GITLAB = "gitlab"
    GOOGLE = "google"
    MICROSOFT = "microsoft"


@dataclass(frozen=True)
class ProviderConfig:
    """Per-deployment provider configuration.

    Produced by whichever loader the deployment uses. Every field is
    optional here; each provider decides what it requires.
    """

    client_id: str | None = None
    client_secret: str | None = field(default=None, repr=False)
    display_name: str | None = None


def _require_absolute(url: httpx.URL, name: str) -> None:
    if not url.scheme or not url.host:
        raise InvalidConfigError(name, "must be an absolute URL")


@dataclass(frozen=True)
class ClientSettings:
    """Resolved endpoints and credentials for one provider instance."""

    auth_url: httpx.URL
    token_url: httpx.URL
    client_id: str
    client_secret: str = field(repr=False)

    def __post_init__(self):
        _require_absolute(self.auth_url, "auth url")
        _require_absolute(self.token_url, "token url")
        if not self.client_id:
            raise MissingConfigError("client id")
        if not self.client_secret:
            raise MissingConfigError("client secret")


@dataclass(frozen=True)
class Identity:
    """Normalized result of a successful login.

    All providers return data in this format regardless of their
    native user info structure.
    """

    # Stable per human across logins; the account-linking key
    provider_user_id: str
    provider_id: ProviderId
    email: str
    verified: bool
    avatar: str | None = None

    def __post_init__(self):
        if not self.provider_user_id:
            raise ValueError("provider_user_id must not be empty")
        if not self.email:
            raise ValueError("email must not be empty")


@dataclass(frozen=True)
class ProviderFactory:
    """Provider metadata paired with a constructor.

    ``build`` takes a ProviderConfig (plus optional keyword options such as
    ``timeout`` and ``transport``) and returns a provider, or raises
    OAuthProviderError naming the offending field.
    """

    id: ProviderId
    name: str
    display_name: str
    build: Callable[..., "OAuthProvider"] = field(compare=False)


class OAuthProvider(ABC):
    """Abstract base class for OAuth providers.

    Subclasses declare their endpoints and defaults as class attributes and
    implement:
    - _default_scopes(): Scopes to request during authorization
    - get_user(): Exchange an access token for a normalized Identity

    Optional overrides:
    - authorization_params(): Extra query parameters for the authorize URL

    Instances are immutable after construction and safe to share between
    concurrent get_user calls.
    """

    PROVIDER_ID: ClassVar[ProviderId]
    DISPLAY_NAME: ClassVar[str]
    AUTHORIZE_URL: ClassVar[str]
    TOKEN_URL: ClassVar[str]

    def __init__(
        self,
        config: ProviderConfig,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not config.client_id or not config.client_id.strip():
            raise MissingConfigError(f"{self.DISPLAY_NAME} client id")
        if not config.client_secret or not config.client_secret.strip():
            raise MissingConfigError(f"{self.DISPLAY_NAME} client secret")

        self._display_name = config.display_name or self.DISPLAY_NAME
        self._settings = ClientSettings(
            auth_url=httpx.URL(self.AUTHORIZE_URL),
            token_url=httpx.URL(self.TOKEN_URL),
            client_id=config.client_id,
            client_secret=config.client_secret,
        )
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @property
    def name(self) -> str:
        """Machine identifier, used as config key and routing key."""
        return self.PROVIDER_ID.value

    @property
    def provider_id(self) -> ProviderId:
        return self.PROVIDER_ID

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        return self._display_name

    def settings(self) -> ClientSettings:
        """Endpoints and credentials, resolved and validated at construction."""
        return self._settings

    def scopes(self) -> list[str]:
        """Ordered OAuth scopes to request from the provider."""
        return list(self._default_scopes())

    def authorization_params(self) -> dict[str, str]:
        """Extra provider-specific query parameters for the authorize URL."""
        return {}

    @abstractmethod
    def _default_scopes(self) -> list[str]:
        """Default scopes for this provider."""
        pass

    @abstractmethod
    async def get_user(self, access_token: str) -> Identity:
        """Fetch the identity behind an access token.

        Args:
            access_token: OAuth access token from the code exchange

        Returns:
            Normalized identity

        Raises:
            UnauthorizedError: Token rejected or account not verified
            FailedDependencyError: Provider unreachable or response malformed
        """
        pass

    def _client(self) -> httpx.AsyncClient:
        """New HTTP client for a single call."""
        return httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def factory(cls) -> ProviderFactory:
        """Registry entry for this provider."""

        def build(config: ProviderConfig, **options: Any) -> "OAuthProvider":
            return cls(config, **options)

        return ProviderFactory(
            id=cls.PROVIDER_ID,
            name=cls.PROVIDER_ID.value,
            display_name=cls.DISPLAY_NAME,
            build=build,
        )
