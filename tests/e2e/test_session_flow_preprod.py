"""E2E tests for the session cookie functions (preprod).

Runs against deployed session/signout functions and validates:
- A first request is issued a signed session cookie
- The cookie verifies locally with the shared secret
- Sending it back refreshes the session and keeps the identifier
- Signout expires the cookie

Requirements:
- PREPROD_API_URL: base URL serving /session and /signout
- PREPROD_SESSION_COOKIE_SECRET: the secret the deployed functions sign with
"""

import os

import httpx
import pytest

from src.lambdas.shared.auth.session_cookie import parse_session, verify_session_string
from src.lambdas.shared.models.session_config import SessionCookieConfig
from src.lambdas.shared.utils.cookie_helpers import parse_cookie

pytestmark = [pytest.mark.preprod]


@pytest.fixture
def preprod_base_url() -> str:
    """Get preprod API base URL from environment."""
    url = os.environ.get("PREPROD_API_URL")
    if not url:
        pytest.skip("PREPROD_API_URL not set - skipping preprod tests")
    return url.rstrip("/")


@pytest.fixture
def preprod_config() -> SessionCookieConfig:
    """Session config signing with the deployed secret."""
    secret = os.environ.get("PREPROD_SESSION_COOKIE_SECRET")
    if not secret:
        pytest.skip("PREPROD_SESSION_COOKIE_SECRET not set - skipping preprod tests")
    return SessionCookieConfig(secret_key=secret)


@pytest.fixture
def http_client():
    with httpx.Client(timeout=30.0) as client:
        yield client


def _set_cookies(response: httpx.Response) -> list[str]:
    return response.headers.get_list("set-cookie")


class TestSessionFlow:
    def test_issue_refresh_signout(
        self,
        http_client: httpx.Client,
        preprod_base_url: str,
        preprod_config: SessionCookieConfig,
    ):
        first = http_client.get(f"{preprod_base_url}/session")
        assert first.status_code == 200

        parsed = parse_cookie(_set_cookies(first))
        session = parsed.pop("session")
        assert parsed == {
            "Max-Age": "604800",
            "Path": "/",
            "HttpOnly": True,
            "Secure": True,
            "SameSite": "Lax",
        }
        assert verify_session_string(session, preprod_config)
        identifier = parse_session(session, preprod_config)["identifier"]

        second = http_client.get(
            f"{preprod_base_url}/session",
            headers={"Cookie": f"session={session}"},
        )
        assert second.status_code == 200
        refreshed = parse_cookie(_set_cookies(second))["session"]
        assert parse_session(refreshed, preprod_config)["identifier"] == identifier

        signout = http_client.get(
            f"{preprod_base_url}/signout",
            headers={"Cookie": f"session={refreshed}"},
        )
        assert signout.status_code == 200
        assert parse_cookie(_set_cookies(signout))["session"] == "deleted"

    def test_forged_cookie_rejected(self, http_client: httpx.Client, preprod_base_url: str):
        response = http_client.get(
            f"{preprod_base_url}/session",
            headers={"Cookie": "session=" + "x" * 27 + "eyJpZGVudGlmaWVyIjoiYWRtaW4ifQ=="},
        )
        assert response.status_code == 401
