from typing import Any, Dict, Optional

import requests

from app.core.config import settings
from app.core.exceptions import (
    AuthenticationError,
    BadRequestError,
    ExternalApiError,
    RateLimitError,
    UpstreamUnavailableError,
)
from app.core.logging import get_logger
from app.providers.auth import AuthTokenCache

logger = get_logger(__name__)


def classify_response_error(response: requests.Response, provider: str) -> ExternalApiError:
    """Map a failed upstream response to an application error."""
    status = response.status_code
    body = response.text[:500] if response.text else ""

    if status == 400:
        return BadRequestError(f"Invalid request: {body}", provider=provider)
    if status == 401:
        return AuthenticationError("Authentication failed. Please try again.", provider=provider)
    if status == 429:
        return RateLimitError(provider=provider)
    if status >= 500:
        return UpstreamUnavailableError(provider=provider)
    return ExternalApiError(f"{provider} API error: {status} - {body}", provider=provider)


def authorized_get(
    url: str,
    token_cache: AuthTokenCache,
    params: Dict[str, Any],
    timeout: float = settings.HTTP_TIMEOUT_SECONDS,
    token: Optional[str] = None,
) -> Dict[str, Any]:
    """
    GET an upstream endpoint with a cached bearer token.

    A 401 response drops the cached token before the error is raised so the
    next call authenticates again. No request is retried here. A token the
    caller already holds is used as is.
    """
    provider = token_cache.provider
    token = token or token_cache.get()

    try:
        response = requests.get(
            url,
            headers={"Authorization": f"Bearer {token}"},
            params=params,
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.error(f"{provider} request failed: {e}", extra={"url": url})
        raise UpstreamUnavailableError(f"{provider} request failed: {e}", provider=provider)

    if response.status_code == 401:
        token_cache.invalidate()

    if not 200 <= response.status_code < 300:
        error = classify_response_error(response, provider)
        logger.warning(
            "Upstream request failed",
            extra={"provider": provider, "url": url, "status_code": response.status_code},
        )
        raise error

    return response.json()
