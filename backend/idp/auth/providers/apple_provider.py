"""Sign in with Apple Provider.

Apple has no user info endpoint. Identity claims (subject, email) arrive in
the signed ID token returned alongside the access token during the code
exchange, so the access token alone can never identify a user.
"""

from typing import Any

import httpx
import jwt

from idp.auth.errors import FailedDependencyError, UnauthorizedError
from idp.auth.providers.base import Identity, OAuthProvider, ProviderId
from idp.core.logging import get_logger

logger = get_logger(__name__)


class AppleProvider(OAuthProvider):
    """Sign in with Apple provider implementation.

    get_user() always rejects. Callers holding the ID token from the code
    exchange use verify_id_token(), which checks the signature against
    Apple's published keys before trusting any claim.
    """

    PROVIDER_ID = ProviderId.APPLE
    DISPLAY_NAME = "Apple"

    AUTHORIZE_URL = "https://appleid.apple.com/auth/authorize"
    TOKEN_URL = "https://appleid.apple.com/auth/token"
    JWKS_URL = "https://appleid.apple.com/auth/keys"
    ISSUER = "https://appleid.apple.com"
    ALGORITHMS = ["RS256"]

    def _default_scopes(self) -> list[str]:
        return ["name", "email"]

    def authorization_params(self) -> dict[str, str]:
        # Apple requires form_post whenever name or email scopes are requested
        return {"response_mode": "form_post"}

    async def get_user(self, access_token: str) -> Identity:
        """Reject: claims live in the ID token, not behind the access token."""
        raise UnauthorizedError()

    async def verify_id_token(self, id_token: str) -> Identity:
        """Verify an Apple ID token and map its claims to an Identity.

        Checks the RS256 signature against Apple's JWKS and requires the
        issuer, audience (our client id) and expiry claims.

        Args:
            id_token: ``id_token`` field of the token endpoint response

        Returns:
            Identity for the token subject

        Raises:
            UnauthorizedError: Bad signature, wrong issuer/audience, expired,
                or the email is not verified
            FailedDependencyError: Apple's key set could not be fetched
        """
        try:
            header = jwt.get_unverified_header(id_token)
        except jwt.PyJWTError as e:
            raise UnauthorizedError("malformed Apple ID token") from e

        kid = header.get("kid")
        if not kid:
            raise UnauthorizedError("Apple ID token has no key id")

        signing_key = self._find_key(await self._fetch_jwks(), kid)

        try:
            claims = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=self.ALGORITHMS,
                audience=self.settings().client_id,
                issuer=self.ISSUER,
                options={"require": ["iss", "aud", "exp", "sub"]},
            )
        except jwt.InvalidTokenError as e:
            logger.info("Apple ID token rejected", error=type(e).__name__)
            raise UnauthorizedError("invalid Apple ID token") from e

        return self._identity_from_claims(claims)

    async def _fetch_jwks(self) -> dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.get(self.JWKS_URL)
        except httpx.HTTPError as e:
            logger.warning("Apple key set request failed", error=type(e).__name__)
            raise FailedDependencyError("apple: key set request failed") from e

        if response.status_code != 200:
            logger.warning("Apple key set request failed", status_code=response.status_code)
            raise FailedDependencyError(
                f"apple: unexpected status {response.status_code}"
            )

        try:
            jwks = response.json()
        except ValueError as e:
            raise FailedDependencyError("apple: key set is not JSON") from e
        if not isinstance(jwks, dict):
            raise FailedDependencyError("apple: key set is not a JSON object")
        return jwks

    def _find_key(self, jwks: dict[str, Any], kid: str) -> jwt.PyJWK:
        try:
            key_set = jwt.PyJWKSet.from_dict(jwks)
        except jwt.PyJWTError as e:
            raise FailedDependencyError("apple: unusable key set") from e

        for key in key_set.keys:
            if key.key_id == kid:
                return key
        raise UnauthorizedError("Apple ID token signed with an unknown key")

    def _identity_from_claims(self, claims: dict[str, Any]) -> Identity:
        subject = claims.get("sub")
        email = claims.get("email")
        if not subject or not email:
            raise UnauthorizedError("Apple ID token lacks subject or email")

        # Apple encodes booleans as "true"/"false" strings in some tokens
        if str(claims.get("email_verified")).lower() != "true":
            raise UnauthorizedError("Apple account email is not verified")

        return Identity(
            provider_user_id=subject,
            provider_id=self.PROVIDER_ID,
            email=email,
            verified=True,
        )
