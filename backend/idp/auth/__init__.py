"""Authentication module."""

from idp.auth.errors import (
    AuthError,
    FailedDependencyError,
    InvalidConfigError,
    MissingConfigError,
    OAuthProviderError,
    UnauthorizedError,
)

__all__ = [
    "AuthError",
    "FailedDependencyError",
    "InvalidConfigError",
    "MissingConfigError",
    "OAuthProviderError",
    "UnauthorizedError",
]
