"""
Authorization code exchange with the provider token endpoint.
One attempt, bounded timeout; failures raise TokenExchangeError for the callback to render.
"""
import logging

import httpx

from oauth_bridge.config import TOKEN_EXCHANGE_TIMEOUT_SECONDS
from oauth_bridge.providers import Provider

logger = logging.getLogger(__name__)


class TokenExchangeError(RuntimeError):
    """Code-for-token exchange failed (network, invalid code, provider error)."""

    def __init__(self, error: str, description: str) -> None:
        super().__init__(description)
        self.error = error
        self.description = description


def _post_token_request(provider: Provider, code: str, timeout: float) -> httpx.Response:
    if provider.name == "notion":
        # Notion: JSON body, client credentials via HTTP Basic
        return httpx.post(
            provider.token_url,
            json={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": provider.redirect_uri,
            },
            auth=(provider.client_id, provider.client_secret),
            headers={"Accept": "application/json"},
            timeout=timeout,
        )
    return httpx.post(
        provider.token_url,
        data={
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": provider.redirect_uri,
            "client_id": provider.client_id,
            "client_secret": provider.client_secret,
        },
        headers={"Accept": "application/json"},
        timeout=timeout,
    )


def exchange_code(provider: Provider, code: str, timeout: float = TOKEN_EXCHANGE_TIMEOUT_SECONDS) -> dict:
    """
    Exchange code for tokens. redirect_uri is the same one the authorize URL used.
    Returns the provider's token response as a dict (opaque to the bridge).
    """
    try:
        r = _post_token_request(provider, code, timeout)
    except httpx.HTTPError as e:
        logger.warning("Token exchange with %s failed: %s", provider.name, e)
        raise TokenExchangeError("token_exchange_failed", f"Could not reach {provider.name}: {e}") from e

    if r.status_code != 200:
        err = {}
        if r.headers.get("content-type", "").startswith("application/json"):
            try:
                err = r.json()
            except ValueError:
                err = {}
            if not isinstance(err, dict):
                err = {}
        err_desc = err.get("error_description", err.get("error", r.text)) or "Token exchange failed"
        logger.warning("Token exchange with %s rejected: status=%s error=%s", provider.name, r.status_code, err.get("error"))
        raise TokenExchangeError("token_exchange_failed", str(err_desc))

    try:
        data = r.json()
    except ValueError as e:
        raise TokenExchangeError("token_exchange_failed", "Token response was not JSON") from e
    if not isinstance(data, dict) or not data.get("access_token"):
        raise TokenExchangeError("token_exchange_failed", f"No access token received from {provider.name}")

    logger.info("Token exchange with %s succeeded; fields=%s", provider.name, sorted(data))
    return data
