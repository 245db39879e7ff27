from starlette.requests import Request
from middleware.rate_limiter import limiter, get_token_key
from core.config import settings
from services.token_service import TokenService


def make_request(headers: dict) -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/tokens",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": ("10.0.0.7", 1234),
    })


def test_rate_limiter_disabled_in_testing():
    """Verify rate limiter is disabled during tests."""

    assert settings.ENV == "testing"
    assert limiter.enabled is False


def test_rate_limit_key_uses_token_hash():
    key = get_token_key(make_request({"Authorization": "Bearer my-secret"}))

    assert key.startswith("token:")
    assert "my-secret" not in key
    assert key == "token:" + TokenService.hash_token("my-secret")[:32]


def test_rate_limit_key_falls_back_to_client_ip():
    assert get_token_key(make_request({})) == "10.0.0.7"


async def test_can_make_multiple_requests_in_tests(client, issued_token):
    """Verify rate limiting doesn't interfere with tests."""
    secret, _ = issued_token
    for i in range(40):
        response = await client.get("/tokens", headers={"Authorization": f"Bearer {secret}"})
        assert response.status_code == 200
