"""
Synk OAuth bridge. The desktop app cannot receive a browser redirect, so:
GET /auth/{provider} redirects the system browser to the provider with a state token,
GET /oauth2callback[/{provider}] exchanges the code and publishes the result under that state,
GET /api/oauth/result is polled by the desktop app and hands the result out once.
"""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from oauth_bridge.auth_request import build_authorize_url, generate_state
from oauth_bridge.config import (
    CORS_ORIGINS,
    DATABASE_URL,
    HOST,
    OAUTH_PROVIDERS,
    PORT,
    RESULT_TTL_SECONDS,
    SWEEP_INTERVAL_SECONDS,
)
from oauth_bridge.pages import error_page, provider_label, success_page
from oauth_bridge.providers import get_provider, load_providers, validate_providers
from oauth_bridge.result_store import ResultStore, create_store
from oauth_bridge.sweeper import run_sweeper
from oauth_bridge.token_exchange import TokenExchangeError, exchange_code

logger = logging.getLogger(__name__)

PROVIDERS = load_providers()
store = create_store(DATABASE_URL, RESULT_TTL_SECONDS)


def get_store() -> ResultStore:
    """Dependency: the process-wide result store."""
    return store


def _short(state: str) -> str:
    """State prefix for logs; the full token is a bearer secret until consumed."""
    return state[:8]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Fail fast on missing provider credentials; run the TTL sweep while serving."""
    validate_providers(PROVIDERS, OAUTH_PROVIDERS)
    enabled = [name for name, p in PROVIDERS.items() if p.configured]
    logger.info("OAuth bridge starting; providers=%s store=%s", enabled, type(store).__name__)
    sweeper = asyncio.create_task(run_sweeper(store, SWEEP_INTERVAL_SECONDS))
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


app = FastAPI(title="Synk OAuth Bridge", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.get("/")
def index():
    """Service banner with the endpoint list."""
    return {
        "message": "Synk OAuth Bridge",
        "status": "running",
        "endpoints": [
            "GET /_health",
            "GET /auth/{provider}",
            "GET /oauth2callback",
            "GET /oauth2callback/{provider}",
            "GET /api/oauth/result",
        ],
    }


@app.get("/_health")
def health():
    """Liveness probe."""
    return {"ok": True}


@app.get("/auth/{provider_name}")
def start_auth(provider_name: str, state: str | None = None):
    """
    Redirect the browser to the provider. A client-supplied state is used as-is so the
    desktop app can poll for it; otherwise one is generated. Nothing is stored here.
    """
    provider = get_provider(PROVIDERS, provider_name)
    if provider is None:
        return JSONResponse({"error": "unknown_provider"}, status_code=404)

    state = state or generate_state()
    url = build_authorize_url(provider, state)
    logger.info("Auth start provider=%s state=%s", provider.name, _short(state))
    return RedirectResponse(url=url, status_code=302)


def _handle_callback(
    provider_name: str,
    code: str | None,
    state: str | None,
    error: str | None,
    error_description: str | None,
    results: ResultStore,
) -> HTMLResponse:
    provider = get_provider(PROVIDERS, provider_name)
    if provider is None:
        return HTMLResponse(
            error_page("Unknown provider", f"No OAuth provider named {provider_name!r}.", "unknown_provider"),
            status_code=404,
        )
    label = provider_label(provider.name)

    # Provider-reported error (e.g. user denied consent): terminal, nothing to correlate
    if error is not None:
        logger.warning("Provider %s returned error=%s", provider.name, error)
        return HTMLResponse(
            error_page(f"{label} authorization failed", error_description or error, error),
            status_code=400,
        )

    if not code or not state:
        logger.warning("Callback for %s missing parameters code=%s state=%s", provider.name, bool(code), bool(state))
        return HTMLResponse(
            error_page("Missing parameters", "Missing authorization code or state parameter.", "missing_parameters"),
            status_code=400,
        )

    # No store access until the exchange has finished
    try:
        tokens = exchange_code(provider, code)
    except TokenExchangeError as e:
        results.put_failure(state, e.error, e.description, provider=provider.name)
        logger.warning("Stored failure for provider=%s state=%s: %s", provider.name, _short(state), e.error)
        return HTMLResponse(
            error_page(f"{label} connection failed", e.description, e.error),
            status_code=500,
        )

    results.put(state, tokens, provider=provider.name)
    logger.info("Stored tokens for provider=%s state=%s", provider.name, _short(state))
    return HTMLResponse(success_page(provider.name))


@app.get("/oauth2callback", response_class=HTMLResponse)
def google_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
    results: ResultStore = Depends(get_store),
):
    """Google redirect URI (kept at the bare path registered with Google)."""
    return _handle_callback("google", code, state, error, error_description, results)


@app.get("/oauth2callback/{provider_name}", response_class=HTMLResponse)
def provider_callback(
    provider_name: str,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    error_description: str | None = None,
    results: ResultStore = Depends(get_store),
):
    """Redirect URI for the other providers, e.g. /oauth2callback/notion."""
    return _handle_callback(provider_name, code, state, error, error_description, results)


@app.get("/api/oauth/result")
def oauth_result(state: str | None = None, results: ResultStore = Depends(get_store)):
    """
    Poll for the result of a flow. pending until the callback has published, then ready
    (tokens) or failed exactly once; consumed, expired and unknown states all read as pending.
    """
    if not state:
        return JSONResponse({"error": "missing_state"}, status_code=400)

    result = results.take(state)
    if result is None:
        return {"status": "pending"}

    logger.info("Delivered %s result provider=%s state=%s", result.status, result.provider, _short(state))
    return result.to_response()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "oauth_bridge.main:app",
        host=HOST,
        port=PORT,
    )
