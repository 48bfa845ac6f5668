"""Tests for Sign in with Apple.

Covers:
- Fail-closed get_user (claims never come from the access token)
- ID token verification against a mocked Apple key set
- Claim checks (issuer, audience, expiry, email_verified)
"""

import json
import time

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.algorithms import RSAAlgorithm

from idp.auth.errors import FailedDependencyError, UnauthorizedError
from idp.auth.providers.apple_provider import AppleProvider
from idp.auth.providers.base import ProviderId

KEY_ID = "W6WcOKB"


@pytest.fixture(scope="module")
def signing_key():
    """RSA key standing in for Apple's signing key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def jwks(signing_key):
    """Apple-style JWKS document for the test key."""
    jwk = json.loads(RSAAlgorithm.to_jwk(signing_key.public_key()))
    jwk.update({"kid": KEY_ID, "alg": "RS256", "use": "sig"})
    return {"keys": [jwk]}


@pytest.fixture
def apple(provider_config, jwks):
    """AppleProvider whose key set requests hit a mock transport."""
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == AppleProvider.JWKS_URL
        return httpx.Response(200, json=jwks)

    return AppleProvider(provider_config, transport=httpx.MockTransport(handler))


def make_claims(**overrides):
    now = int(time.time())
    claims = {
        "iss": AppleProvider.ISSUER,
        "aud": "test-client-id",
        "sub": "001234.abcdef0123456789.0123",
        "email": "user@privaterelay.appleid.com",
        "email_verified": "true",
        "is_private_email": "true",
        "iat": now,
        "exp": now + 600,
    }
    claims.update(overrides)
    return claims


def sign(signing_key, claims, kid=KEY_ID):
    return jwt.encode(claims, signing_key, algorithm="RS256", headers={"kid": kid})


class TestAppleMetadata:
    """Tests for Apple provider metadata."""

    def test_scopes(self, provider_config):
        assert AppleProvider(provider_config).scopes() == ["name", "email"]

    def test_settings(self, provider_config):
        settings = AppleProvider(provider_config).settings()
        assert str(settings.auth_url) == "https://appleid.apple.com/auth/authorize"
        assert str(settings.token_url) == "https://appleid.apple.com/auth/token"

    def test_authorization_params(self, provider_config):
        params = AppleProvider(provider_config).authorization_params()
        assert params == {"response_mode": "form_post"}


class TestAppleGetUser:
    """get_user() is a fail-closed stub."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "any-token", "eyJhbGciOiJub25lIn0.e30."])
    async def test_always_unauthorized(self, token, provider_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("get_user must not perform network I/O")

        provider = AppleProvider(provider_config, transport=httpx.MockTransport(handler))

        with pytest.raises(UnauthorizedError):
            await provider.get_user(token)


class TestAppleVerifyIdToken:
    """Tests for AppleProvider.verify_id_token()."""

    @pytest.mark.asyncio
    async def test_valid_token(self, apple, signing_key):
        identity = await apple.verify_id_token(sign(signing_key, make_claims()))

        assert identity.provider_user_id == "001234.abcdef0123456789.0123"
        assert identity.provider_id is ProviderId.APPLE
        assert identity.email == "user@privaterelay.appleid.com"
        assert identity.verified is True
        assert identity.avatar is None

    @pytest.mark.asyncio
    async def test_boolean_email_verified(self, apple, signing_key):
        token = sign(signing_key, make_claims(email_verified=True))
        identity = await apple.verify_id_token(token)
        assert identity.verified is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["false", False, None])
    async def test_unverified_email_rejected(self, value, apple, signing_key):
        token = sign(signing_key, make_claims(email_verified=value))
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token(token)

    @pytest.mark.asyncio
    async def test_wrong_audience(self, apple, signing_key):
        token = sign(signing_key, make_claims(aud="someone-else"))
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token(token)

    @pytest.mark.asyncio
    async def test_wrong_issuer(self, apple, signing_key):
        token = sign(signing_key, make_claims(iss="https://evil.example.com"))
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token(token)

    @pytest.mark.asyncio
    async def test_expired(self, apple, signing_key):
        past = int(time.time()) - 3600
        token = sign(signing_key, make_claims(iat=past - 600, exp=past))
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token(token)

    @pytest.mark.asyncio
    async def test_missing_email(self, apple, signing_key):
        claims = make_claims()
        del claims["email"]
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token(sign(signing_key, claims))

    @pytest.mark.asyncio
    async def test_unknown_key_id(self, apple, signing_key):
        token = sign(signing_key, make_claims(), kid="rotated-away")
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token(token)

    @pytest.mark.asyncio
    async def test_signed_by_other_key(self, apple):
        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        token = sign(other_key, make_claims())
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token(token)

    @pytest.mark.asyncio
    async def test_unsigned_token_rejected(self, apple):
        token = jwt.encode(make_claims(), None, algorithm="none", headers={"kid": KEY_ID})
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token(token)

    @pytest.mark.asyncio
    async def test_garbage_token(self, apple):
        with pytest.raises(UnauthorizedError):
            await apple.verify_id_token("not-a-jwt")

    @pytest.mark.asyncio
    async def test_key_set_unavailable(self, provider_config, signing_key):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="Service Unavailable")

        provider = AppleProvider(provider_config, transport=httpx.MockTransport(handler))

        with pytest.raises(FailedDependencyError):
            await provider.verify_id_token(sign(signing_key, make_claims()))

    @pytest.mark.asyncio
    async def test_key_set_unreachable(self, provider_config, signing_key):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = AppleProvider(provider_config, transport=httpx.MockTransport(handler))

        with pytest.raises(FailedDependencyError):
            await provider.verify_id_token(sign(signing_key, make_claims()))
