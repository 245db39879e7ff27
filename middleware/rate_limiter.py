from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from core.config import settings
from services.token_service import TokenService


def get_token_key(request: Request):
    """
    Rate-limit per session when a bearer token is presented, per client IP
    otherwise. The key is derived from the token hash, never the secret.
    """
    scheme, _, secret = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and secret.strip():
        return "token:" + TokenService.hash_token(secret.strip())[:32]

    return get_remote_address(request)

limiter = Limiter(
    key_func=get_token_key,
    default_limits=["200/hour"],
    enabled=settings.ENV != "testing"
)
