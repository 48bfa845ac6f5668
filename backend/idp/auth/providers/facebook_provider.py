"""Facebook OAuth Provider."""

from typing import Any

from idp.auth.providers.base import Identity, OAuthProvider, ProviderId
from idp.auth.providers.http import get_json, require_object, require_str


class FacebookProvider(OAuthProvider):
    """Facebook Login provider implementation.

    The Graph API has no verified flag; it only returns an email once the
    user has confirmed it, so a returned email is treated as verified.
    """

    PROVIDER_ID = ProviderId.FACEBOOK
    DISPLAY_NAME = "Facebook"

    AUTHORIZE_URL = "https://www.facebook.com/v19.0/dialog/oauth"
    TOKEN_URL = "https://graph.facebook.com/v19.0/oauth/access_token"
    USER_URL = "https://graph.facebook.com/me?fields=id,email,name,picture"

    def _default_scopes(self) -> list[str]:
        return ["email"]

    async def get_user(self, access_token: str) -> Identity:
        async with self._client() as client:
            payload = await get_json(client, self.USER_URL, access_token, provider=self.name)

        user = require_object(payload, self.name)

        return Identity(
            provider_user_id=require_str(user, "id", self.name),
            provider_id=self.PROVIDER_ID,
            email=require_str(user, "email", self.name),
            verified=True,
            avatar=_picture_url(user.get("picture")),
        )


def _picture_url(picture: Any) -> str | None:
    # {"picture": {"data": {"url": "...", "is_silhouette": false}}}
    if not isinstance(picture, dict):
        return None
    data = picture.get("data")
    if not isinstance(data, dict) or data.get("is_silhouette"):
        return None
    return data.get("url") or None
