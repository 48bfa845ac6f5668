"""Microsoft OAuth Provider.

Uses the multi-tenant ``common`` endpoint of the Microsoft identity platform.
"""

from idp.auth.providers.base import Identity, OAuthProvider, ProviderId
from idp.auth.providers.http import get_json, require_object, require_str


class MicrosoftProvider(OAuthProvider):
    """Microsoft (Entra ID / personal account) provider implementation.

    The userinfo endpoint carries no email verification claim, so identities
    are returned with verified=False and linking them to an existing account
    is left to the caller.
    """

    PROVIDER_ID = ProviderId.MICROSOFT
    DISPLAY_NAME = "Microsoft"

    AUTHORIZE_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/authorize"
    TOKEN_URL = "https://login.microsoftonline.com/common/oauth2/v2.0/token"
    USERINFO_URL = "https://graph.microsoft.com/oidc/userinfo"

    def _default_scopes(self) -> list[str]:
        return ["openid", "email", "profile"]

    async def get_user(self, access_token: str) -> Identity:
        async with self._client() as client:
            payload = await get_json(client, self.USERINFO_URL, access_token, provider=self.name)

        user = require_object(payload, self.name)

        # The picture claim points at a Graph resource that needs the token
        return Identity(
            provider_user_id=require_str(user, "sub", self.name),
            provider_id=self.PROVIDER_ID,
            email=require_str(user, "email", self.name),
            verified=False,
        )
