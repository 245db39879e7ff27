from fastapi import APIRouter, Request
from starlette import status
from middleware.rate_limiter import limiter
from schemas.token_schemas import MessageResponse, TokenResponse
from services.token_service import TokenService
from utils.deps import db_dependency, secret_dependency, token_dependency
from utils.logger import get_logger

logger = get_logger(__name__)


router = APIRouter(tags=["tokens"])


@router.get("/tokens", response_model=list[TokenResponse], status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def list_tokens(request: Request, current: token_dependency, db: db_dependency):
    """
    List the caller's sessions and app-passwords (at most 1000).
    """
    current_id = current.id
    tokens = TokenService.get_user_tokens(db, current.uid)

    return [
        TokenResponse.model_validate(token).model_copy(update={"current": token.id == current_id})
        for token in tokens
    ]


@router.delete("/tokens/{token_id}", response_model=MessageResponse, status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def revoke_token(request: Request, token_id: int, current: token_dependency, db: db_dependency):
    """
    Revoke one of the caller's tokens. Ids belonging to other users, or
    already revoked, are silently ignored.
    """
    TokenService.invalidate_token_by_id(db, current.uid, token_id)

    return {"message": "Token revoked"}


@router.post("/auth/logout", response_model=MessageResponse, status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def logout(request: Request, secret: secret_dependency, db: db_dependency):
    """
    Revoke the presented token. Idempotent: an unknown or already revoked
    token still logs out successfully.
    """
    TokenService.invalidate_token(db, secret)

    return {"message": "Logged out successfully"}
