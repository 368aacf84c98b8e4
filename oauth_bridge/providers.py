"""
Provider registry: endpoints and credentials for each OAuth provider the bridge brokers.
Built from config at import of the app; validated in the app lifespan so a missing
credential stops the service from starting instead of failing per request.
"""
from dataclasses import dataclass, field

from oauth_bridge import config

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
NOTION_AUTHORIZE_URL = "https://api.notion.com/v1/oauth/authorize"
NOTION_TOKEN_URL = "https://api.notion.com/v1/oauth/token"


@dataclass
class Provider:
    name: str
    client_id: str
    client_secret: str
    redirect_uri: str
    authorize_url: str
    token_url: str
    scopes: list[str] = field(default_factory=list)
    # Env var names, for error messages only
    env_keys: tuple[str, str] = ("", "")

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


def load_providers() -> dict[str, Provider]:
    """All known providers keyed by name, whether configured or not."""
    return {
        "google": Provider(
            name="google",
            client_id=config.GOOGLE_CLIENT_ID,
            client_secret=config.GOOGLE_CLIENT_SECRET,
            redirect_uri=config.GOOGLE_REDIRECT_URI,
            authorize_url=GOOGLE_AUTHORIZE_URL,
            token_url=GOOGLE_TOKEN_URL,
            scopes=list(config.GOOGLE_SCOPES),
            env_keys=("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET"),
        ),
        "notion": Provider(
            name="notion",
            client_id=config.NOTION_CLIENT_ID,
            client_secret=config.NOTION_CLIENT_SECRET,
            redirect_uri=config.NOTION_REDIRECT_URI,
            authorize_url=NOTION_AUTHORIZE_URL,
            token_url=NOTION_TOKEN_URL,
            env_keys=("NOTION_CLIENT_ID", "NOTION_CLIENT_SECRET"),
        ),
    }


def validate_providers(providers: dict[str, Provider], required: list[str]) -> None:
    """
    Raise RuntimeError if a required provider is unknown or lacks credentials.
    Lists every missing variable at once.
    """
    unknown = [name for name in required if name not in providers]
    if unknown:
        raise RuntimeError(f"Unknown OAuth providers in OAUTH_PROVIDERS: {', '.join(unknown)}")

    missing: list[str] = []
    for name in required:
        provider = providers[name]
        id_key, secret_key = provider.env_keys
        if not provider.client_id:
            missing.append(id_key)
        if not provider.client_secret:
            missing.append(secret_key)
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")


def get_provider(providers: dict[str, Provider], name: str) -> Provider | None:
    """Provider by name, or None if unknown or not configured."""
    provider = providers.get(name)
    if provider is None or not provider.configured:
        return None
    return provider
