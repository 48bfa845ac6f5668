"""GitLab OAuth Provider."""

from idp.auth.errors import UnauthorizedError
from idp.auth.providers.base import Identity, OAuthProvider, ProviderId
from idp.auth.providers.http import get_json, require_object, require_str


class GitLabProvider(OAuthProvider):
    """GitLab.com OAuth provider implementation."""

    PROVIDER_ID = ProviderId.GITLAB
    DISPLAY_NAME = "GitLab"

    AUTHORIZE_URL = "https://gitlab.com/oauth/authorize"
    TOKEN_URL = "https://gitlab.com/oauth/token"
    USER_URL = "https://gitlab.com/api/v4/user"

    def _default_scopes(self) -> list[str]:
        return ["read_user"]

    async def get_user(self, access_token: str) -> Identity:
        async with self._client() as client:
            payload = await get_json(client, self.USER_URL, access_token, provider=self.name)

        user = require_object(payload, self.name)
        user_id = require_str(user, "id", self.name)

        # Unconfirmed accounts have no confirmation timestamp
        if not user.get("confirmed_at"):
            raise UnauthorizedError("GitLab account email is not confirmed")

        return Identity(
            provider_user_id=user_id,
            provider_id=self.PROVIDER_ID,
            email=require_str(user, "email", self.name),
            verified=True,
            avatar=user.get("avatar_url") or None,
        )
