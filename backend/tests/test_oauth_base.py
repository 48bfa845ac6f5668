"""Tests for the provider value types and error taxonomy."""

import httpx
import pytest

from idp.auth.errors import (
    AuthError,
    FailedDependencyError,
    InvalidConfigError,
    MissingConfigError,
    OAuthProviderError,
    UnauthorizedError,
)
from idp.auth.providers.base import (
    ClientSettings,
    Identity,
    ProviderConfig,
    ProviderId,
)


class TestProviderId:
    """Tests for the provider enumeration."""

    def test_values_are_lowercase_machine_names(self):
        for provider_id in ProviderId:
            assert provider_id.value == provider_id.value.lower()

    def test_lookup_by_value(self):
        assert ProviderId("apple") is ProviderId.APPLE
        assert ProviderId.GITHUB == "github"


class TestProviderConfig:
    """Tests for ProviderConfig."""

    def test_defaults_are_empty(self):
        config = ProviderConfig()
        assert config.client_id is None
        assert config.client_secret is None
        assert config.display_name is None

    def test_is_immutable(self):
        config = ProviderConfig(client_id="id", client_secret="secret")
        with pytest.raises(AttributeError):
            config.client_id = "other"

    def test_repr_hides_secret(self):
        config = ProviderConfig(client_id="id", client_secret="super-secret-value")
        assert "super-secret-value" not in repr(config)


class TestClientSettings:
    """Tests for ClientSettings."""

    def _settings(self, **overrides) -> ClientSettings:
        values = {
            "auth_url": httpx.URL("https://example.com/authorize"),
            "token_url": httpx.URL("https://example.com/token"),
            "client_id": "id",
            "client_secret": "secret",
        }
        values.update(overrides)
        return ClientSettings(**values)

    def test_equal_values_compare_equal(self):
        assert self._settings() == self._settings()

    def test_relative_auth_url_rejected(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            self._settings(auth_url=httpx.URL("/authorize"))
        assert exc_info.value.field == "auth url"

    def test_relative_token_url_rejected(self):
        with pytest.raises(InvalidConfigError):
            self._settings(token_url=httpx.URL("token"))

    def test_empty_credentials_rejected(self):
        with pytest.raises(MissingConfigError, match="client id"):
            self._settings(client_id="")
        with pytest.raises(MissingConfigError, match="client secret"):
            self._settings(client_secret="")

    def test_repr_hides_secret(self):
        settings = self._settings(client_secret="super-secret-value")
        assert "super-secret-value" not in repr(settings)


class TestIdentity:
    """Tests for the normalized Identity."""

    def test_fields(self):
        identity = Identity(
            provider_user_id="123",
            provider_id=ProviderId.DISCORD,
            email="user@example.com",
            verified=True,
        )
        assert identity.avatar is None
        assert identity.provider_id is ProviderId.DISCORD

    def test_empty_user_id_rejected(self):
        with pytest.raises(ValueError):
            Identity(
                provider_user_id="",
                provider_id=ProviderId.GOOGLE,
                email="user@example.com",
                verified=True,
            )

    def test_empty_email_rejected(self):
        with pytest.raises(ValueError):
            Identity(
                provider_user_id="123",
                provider_id=ProviderId.GOOGLE,
                email="",
                verified=True,
            )


class TestErrorTaxonomy:
    """Configuration and authentication errors must stay disjoint."""

    def test_config_errors_are_not_auth_errors(self):
        assert not issubclass(MissingConfigError, AuthError)
        assert not issubclass(InvalidConfigError, AuthError)

    def test_auth_errors_are_not_config_errors(self):
        assert not issubclass(UnauthorizedError, OAuthProviderError)
        assert not issubclass(FailedDependencyError, OAuthProviderError)

    def test_missing_config_names_field(self):
        error = MissingConfigError("Apple client id")
        assert error.field == "Apple client id"
        assert str(error) == "missing Apple client id"

    def test_unauthorized_default_message(self):
        assert str(UnauthorizedError()) == "unauthorized"
