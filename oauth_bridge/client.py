"""
Desktop side of the bridge: open start_url() in the system browser, then poll_for_result()
until the backend has the tokens. The caller owns persisting them (keychain etc.).
"""
import logging
import time
from urllib.parse import urlencode

import httpx

from oauth_bridge.auth_request import generate_state

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 2.0
POLL_TIMEOUT_SECONDS = 120.0


class OAuthFlowFailed(RuntimeError):
    """The backend reported a terminal failure for this flow (e.g. code exchange failed)."""

    def __init__(self, error: str, description: str | None = None) -> None:
        super().__init__(description or error)
        self.error = error
        self.description = description


class PollTimeout(RuntimeError):
    pass


def start_url(backend_url: str, provider: str, state: str | None = None) -> tuple[str, str]:
    """Return (state, url) for the browser. Generates the state if not given."""
    state = state or generate_state()
    url = f"{backend_url.rstrip('/')}/auth/{provider}?{urlencode({'state': state})}"
    return state, url


def poll_for_result(
    backend_url: str,
    state: str,
    *,
    interval: float = POLL_INTERVAL_SECONDS,
    timeout: float = POLL_TIMEOUT_SECONDS,
    http_get=httpx.get,
    sleep=time.sleep,
    clock=time.monotonic,
) -> dict:
    """
    Poll GET /api/oauth/result until ready. Returns the token dict.
    Raises OAuthFlowFailed on a failed result, ValueError on 400, PollTimeout after timeout.
    Transport errors, 5xx and non-JSON bodies are retried until the timeout.
    """
    poll_url = f"{backend_url.rstrip('/')}/api/oauth/result"
    start = clock()
    while clock() - start < timeout:
        try:
            r = http_get(poll_url, params={"state": state}, headers={"Accept": "application/json"}, timeout=10.0)
        except httpx.HTTPError as e:
            logger.warning("Poll error: %s", e)
        else:
            try:
                body = r.json()
            except ValueError:
                body = None
            if not isinstance(body, dict):
                # Proxy or captive portal page, not the bridge
                logger.info("Poll returned non-JSON body (status %s), continuing", r.status_code)
            elif r.status_code == 400:
                raise ValueError(f"Poll rejected: {body.get('error', 'bad_request')}")
            elif r.status_code == 200:
                status = body.get("status")
                if status == "ready":
                    return body.get("tokens") or {}
                if status == "failed":
                    raise OAuthFlowFailed(body.get("error") or "oauth_failed", body.get("error_description"))
                logger.debug("Poll status=%s", status)
            else:
                logger.info("Poll returned %s, continuing", r.status_code)
        sleep(interval)
    raise PollTimeout(f"OAuth polling timed out after {timeout:.0f}s")
