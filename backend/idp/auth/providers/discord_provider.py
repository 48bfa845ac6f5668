"""Discord OAuth Provider.

Implements OAuth 2.0 flow for Discord authentication.
"""

from idp.auth.errors import UnauthorizedError
from idp.auth.providers.base import Identity, OAuthProvider, ProviderId
from idp.auth.providers.http import get_json, require_object, require_str


class DiscordProvider(OAuthProvider):
    """Discord OAuth provider implementation."""

    PROVIDER_ID = ProviderId.DISCORD
    DISPLAY_NAME = "Discord"

    AUTHORIZE_URL = "https://discord.com/oauth2/authorize"
    TOKEN_URL = "https://discord.com/api/oauth2/token"
    USER_URL = "https://discord.com/api/users/@me"
    AVATAR_URL = "https://cdn.discordapp.com/avatars/{id}/{avatar}.png"

    def _default_scopes(self) -> list[str]:
        return ["identify", "email"]

    async def get_user(self, access_token: str) -> Identity:
        """Fetch user info from the Discord API."""
        async with self._client() as client:
            payload = await get_json(client, self.USER_URL, access_token, provider=self.name)

        user = require_object(payload, self.name)
        user_id = require_str(user, "id", self.name)

        # Discord sends verified=false for accounts whose email is unconfirmed
        if user.get("verified") is not True:
            raise UnauthorizedError("Discord account email is not verified")

        email = require_str(user, "email", self.name)

        avatar = None
        if user.get("avatar"):
            avatar = self.AVATAR_URL.format(id=user_id, avatar=user["avatar"])

        return Identity(
            provider_user_id=user_id,
            provider_id=self.PROVIDER_ID,
            email=email,
            verified=True,
            avatar=avatar,
        )
