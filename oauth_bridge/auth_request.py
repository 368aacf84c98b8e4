"""
Authorization request helpers: state generation and provider authorize URLs.
The state token is the only thing correlating the browser redirect with the desktop poll,
so it must be unguessable.
"""
import secrets
from urllib.parse import urlencode

from oauth_bridge.providers import Provider


def generate_state() -> str:
    """Opaque correlation token; 32 random bytes, base64url (43 chars)."""
    return secrets.token_urlsafe(32)


def build_authorize_url(provider: Provider, state: str) -> str:
    """Build the provider authorize URL carrying state as a round-tripped parameter."""
    if provider.name == "notion":
        # Notion has no prompt/access_type; tokens do not expire
        params = {
            "client_id": provider.client_id,
            "response_type": "code",
            "owner": "user",
            "redirect_uri": provider.redirect_uri,
            "state": state,
        }
    else:
        params = {
            "response_type": "code",
            "client_id": provider.client_id,
            "redirect_uri": provider.redirect_uri,
            "scope": " ".join(provider.scopes),
            "access_type": "offline",
            # Always re-consent so Google issues a refresh token every time
            "prompt": "consent",
            "state": state,
        }
    return f"{provider.authorize_url}?{urlencode(params)}"
