"""Tests for state generation and provider authorize URLs."""
import re
from urllib.parse import parse_qs, urlparse

from oauth_bridge.auth_request import build_authorize_url, generate_state
from oauth_bridge.providers import GOOGLE_AUTHORIZE_URL, NOTION_AUTHORIZE_URL, Provider


def _google():
    return Provider(
        name="google",
        client_id="gid",
        client_secret="gsecret",
        redirect_uri="https://bridge.example/oauth2callback",
        authorize_url=GOOGLE_AUTHORIZE_URL,
        token_url="https://oauth2.googleapis.com/token",
        scopes=["https://www.googleapis.com/auth/calendar.readonly"],
    )


def _notion():
    return Provider(
        name="notion",
        client_id="nid",
        client_secret="nsecret",
        redirect_uri="https://bridge.example/oauth2callback/notion",
        authorize_url=NOTION_AUTHORIZE_URL,
        token_url="https://api.notion.com/v1/oauth/token",
    )


def test_generate_state_is_long_and_url_safe():
    s = generate_state()
    assert len(s) >= 43
    assert re.match(r"^[A-Za-z0-9_-]+$", s)


def test_generate_state_unique():
    assert len({generate_state() for _ in range(100)}) == 100


def test_google_url_requests_offline_access_and_forces_consent():
    url = build_authorize_url(_google(), "mystate")
    assert url.startswith(GOOGLE_AUTHORIZE_URL + "?")
    query = parse_qs(urlparse(url).query)
    assert query["response_type"] == ["code"]
    assert query["client_id"] == ["gid"]
    assert query["redirect_uri"] == ["https://bridge.example/oauth2callback"]
    assert query["scope"] == ["https://www.googleapis.com/auth/calendar.readonly"]
    assert query["access_type"] == ["offline"]
    assert query["prompt"] == ["consent"]
    assert query["state"] == ["mystate"]


def test_notion_url_has_owner_user():
    url = build_authorize_url(_notion(), "s-2")
    assert url.startswith(NOTION_AUTHORIZE_URL + "?")
    query = parse_qs(urlparse(url).query)
    assert query["owner"] == ["user"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == ["https://bridge.example/oauth2callback/notion"]
    assert query["state"] == ["s-2"]
    assert "prompt" not in query
