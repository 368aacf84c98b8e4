"""
OAuth bridge configuration. Values come from the environment (or a .env loaded by the process manager).
No secrets in this file; provider credentials are validated at startup, see providers.py.
"""
import os

# Public base URL of this service; provider redirect URIs are derived from it
BACKEND_URL = os.environ.get("BACKEND_URL", "http://127.0.0.1:3000").rstrip("/")

# Google (calendar). Redirect URI must match the one registered in Google Cloud byte-for-byte.
GOOGLE_CLIENT_ID = os.environ.get("GOOGLE_CLIENT_ID", "").strip()
GOOGLE_CLIENT_SECRET = os.environ.get("GOOGLE_CLIENT_SECRET", "").strip()
GOOGLE_REDIRECT_URI = os.environ.get("GOOGLE_REDIRECT_URI", f"{BACKEND_URL}/oauth2callback")
GOOGLE_SCOPES = os.environ.get("GOOGLE_SCOPES", "https://www.googleapis.com/auth/calendar.readonly").split()

# Notion (databases)
NOTION_CLIENT_ID = os.environ.get("NOTION_CLIENT_ID", "").strip()
NOTION_CLIENT_SECRET = os.environ.get("NOTION_CLIENT_SECRET", "").strip()
NOTION_REDIRECT_URI = os.environ.get("NOTION_REDIRECT_URI", f"{BACKEND_URL}/oauth2callback/notion")

# Providers that must be fully configured for the service to start.
# Notion is also served whenever its credentials are present.
OAUTH_PROVIDERS = [p.strip() for p in os.environ.get("OAUTH_PROVIDERS", "google").split(",") if p.strip()]

# Results older than this are purged and read as pending (abandoned or never-polled flows)
RESULT_TTL_SECONDS = int(os.environ.get("RESULT_TTL_SECONDS", "600"))

# How often the background sweeper purges expired results
SWEEP_INTERVAL_SECONDS = int(os.environ.get("SWEEP_INTERVAL_SECONDS", "60"))

# Upper bound on the code-for-token call to the provider
TOKEN_EXCHANGE_TIMEOUT_SECONDS = float(os.environ.get("TOKEN_EXCHANGE_TIMEOUT_SECONDS", "10"))

# Shared result store for multi-instance deployments. Empty = in-process memory store.
DATABASE_URL = os.environ.get("BRIDGE_DATABASE_URL", "").strip()

# Browser origins allowed to call the JSON endpoints
CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get(
        "CORS_ORIGINS",
        "https://synk-official.com,http://localhost:3000",
    ).split(",")
    if o.strip()
]

HOST = os.environ.get("BRIDGE_HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", "3000"))
