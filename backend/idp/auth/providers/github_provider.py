"""GitHub OAuth Provider.

Implements OAuth 2.0 flow for GitHub authentication.
"""

from typing import Any

from idp.auth.errors import FailedDependencyError, UnauthorizedError
from idp.auth.providers.base import Identity, OAuthProvider, ProviderId
from idp.auth.providers.http import get_json, require_object, require_str


class GitHubProvider(OAuthProvider):
    """GitHub OAuth provider implementation.

    The profile endpoint only exposes the public email, without a verified
    flag, so the primary address is taken from the emails endpoint.
    """

    PROVIDER_ID = ProviderId.GITHUB
    DISPLAY_NAME = "GitHub"

    AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
    TOKEN_URL = "https://github.com/login/oauth/access_token"
    USER_URL = "https://api.github.com/user"
    EMAILS_URL = "https://api.github.com/user/emails"

    def _default_scopes(self) -> list[str]:
        return ["read:user", "user:email"]

    async def get_user(self, access_token: str) -> Identity:
        """Fetch user info from the GitHub API."""
        async with self._client() as client:
            user_payload = await get_json(client, self.USER_URL, access_token, provider=self.name)
            emails_payload = await get_json(client, self.EMAILS_URL, access_token, provider=self.name)

        user = require_object(user_payload, self.name)
        user_id = require_str(user, "id", self.name)

        primary = self._primary_email(emails_payload)
        if primary is None:
            raise UnauthorizedError("GitHub account has no primary email")
        if primary.get("verified") is not True:
            raise UnauthorizedError("GitHub primary email is not verified")

        return Identity(
            provider_user_id=user_id,
            provider_id=self.PROVIDER_ID,
            email=require_str(primary, "email", self.name),
            verified=True,
            avatar=user.get("avatar_url") or None,
        )

    def _primary_email(self, payload: Any) -> dict[str, Any] | None:
        if not isinstance(payload, list):
            raise FailedDependencyError(f"{self.name}: expected a list of emails")
        return next(
            (e for e in payload if isinstance(e, dict) and e.get("primary")),
            None,
        )
