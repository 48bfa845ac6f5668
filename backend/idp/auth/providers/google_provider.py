"""Google OAuth Provider.

Implements OAuth 2.0 / OIDC flow for Google authentication.
"""

from idp.auth.errors import UnauthorizedError
from idp.auth.providers.base import Identity, OAuthProvider, ProviderId
from idp.auth.providers.http import get_json, require_object, require_str


class GoogleProvider(OAuthProvider):
    """Google OAuth provider implementation.

    Supports:
    - Google Workspace accounts
    - Personal Google accounts
    """

    PROVIDER_ID = ProviderId.GOOGLE
    DISPLAY_NAME = "Google"

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"

    def _default_scopes(self) -> list[str]:
        return ["openid", "email", "profile"]

    async def get_user(self, access_token: str) -> Identity:
        """Fetch user info from Google."""
        async with self._client() as client:
            payload = await get_json(client, self.USERINFO_URL, access_token, provider=self.name)

        user = require_object(payload, self.name)
        subject = require_str(user, "sub", self.name)

        if user.get("email_verified") is not True:
            raise UnauthorizedError("Google account email is not verified")

        return Identity(
            provider_user_id=subject,
            provider_id=self.PROVIDER_ID,
            email=require_str(user, "email", self.name),
            verified=True,
            avatar=user.get("picture") or None,
        )
