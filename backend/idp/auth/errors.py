"""OAuth error taxonomy.

Two disjoint hierarchies:
- OAuthProviderError: a provider could not be built from its configuration.
  Raised at startup, fatal to that provider only.
- AuthError: a single login attempt was rejected. Raised per get_user call.

Messages may name a configuration field but never carry its value.
"""


class OAuthProviderError(Exception):
    """Base exception for provider configuration errors."""
    pass


class MissingConfigError(OAuthProviderError):
    """A required configuration field is absent or blank."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"missing {field}")


class InvalidConfigError(OAuthProviderError):
    """A configuration field is present but unusable."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"invalid {field}: {reason}")


class AuthError(Exception):
    """Base exception for per-login authentication failures."""
    pass


class UnauthorizedError(AuthError):
    """Token invalid, claims unverifiable, account unverified or denied."""

    def __init__(self, message: str = "unauthorized"):
        super().__init__(message)


class FailedDependencyError(AuthError):
    """Provider unreachable or returned an unexpected response."""
    pass
