from starlette.requests import Request
from middleware.rate_limiter import limiter, get_rate_limit_key
from core.config import settings
from services.token_service import TokenService
from tests.conftest import TEST_PASSWORD


def make_request(cookie: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", f"{settings.AUTH_COOKIE_NAME}={cookie}".encode()))
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/api/cart/items",
        "headers": headers,
        "client": ("203.0.113.7", 51234),
    })


def test_rate_limiter_disabled_in_testing():
    """Verify rate limiter is disabled during tests."""

    assert settings.ENV == "testing"
    assert limiter.enabled is False


def test_key_is_username_for_logged_in_callers():
    """Verify limits are tracked per user when a session cookie is present."""
    token, _ = TokenService.create_token("customer")

    assert get_rate_limit_key(make_request(token)) == "user:customer"


def test_key_falls_back_to_address():
    """Verify anonymous and unreadable cookies are keyed by client address."""
    assert get_rate_limit_key(make_request()) == "203.0.113.7"
    assert get_rate_limit_key(make_request("garbage")) == "203.0.113.7"


async def test_can_make_multiple_requests_in_tests(client, customer):
    """Verify rate limiting doesn't interfere with tests."""
    # Make 10 login requests (normally limited to 5/min)
    for i in range(10):
        response = await client.post("/api/auth/login", json={
            "username": customer.username,
            "password": TEST_PASSWORD
        })
        assert response.status_code == 200
