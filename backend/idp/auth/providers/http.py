"""JSON-over-HTTP helpers shared by the user-info providers.

Maps transport and protocol failures onto the AuthError hierarchy so that
providers only deal with the decoded payload.
"""

from typing import Any

import httpx

from idp.auth.errors import FailedDependencyError, UnauthorizedError
from idp.core.logging import get_logger

logger = get_logger(__name__)

# Provider refused the credential itself
REJECTED_STATUS_CODES = {401, 403}


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    access_token: str,
    *,
    provider: str,
) -> Any:
    """GET ``url`` with a bearer token and decode the JSON body.

    Raises:
        UnauthorizedError: Provider rejected the token (401/403)
        FailedDependencyError: Network failure, timeout, other non-2xx
            status, or a body that is not JSON
    """
    try:
        response = await client.get(
            url,
            headers={"Authorization": f"Bearer {access_token}"},
        )
    except httpx.TimeoutException as e:
        logger.warning("Provider request timed out", provider=provider)
        raise FailedDependencyError(f"{provider}: request timed out") from e
    except httpx.HTTPError as e:
        logger.warning("Provider request failed", provider=provider, error=type(e).__name__)
        raise FailedDependencyError(f"{provider}: request failed") from e

    if response.status_code in REJECTED_STATUS_CODES:
        logger.info(
            "Provider rejected access token",
            provider=provider,
            status_code=response.status_code,
        )
        raise UnauthorizedError(f"{provider} rejected the access token")

    if response.status_code != 200:
        logger.warning(
            "Unexpected provider response",
            provider=provider,
            status_code=response.status_code,
        )
        raise FailedDependencyError(
            f"{provider}: unexpected status {response.status_code}"
        )

    try:
        return response.json()
    except ValueError as e:
        raise FailedDependencyError(f"{provider}: response is not JSON") from e


def require_object(payload: Any, provider: str) -> dict[str, Any]:
    """Ensure a decoded payload is a JSON object."""
    if not isinstance(payload, dict):
        raise FailedDependencyError(f"{provider}: expected a JSON object")
    return payload


def require_str(data: dict[str, Any], key: str, provider: str) -> str:
    """Fetch a non-empty identifier-like field, coercing numbers to str.

    Raises UnauthorizedError when the field is absent or empty.
    """
    value = data.get(key)
    if isinstance(value, bool) or value is None:
        raise UnauthorizedError(f"{provider}: missing {key}")
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str) or not value:
        raise UnauthorizedError(f"{provider}: missing {key}")
    return value
