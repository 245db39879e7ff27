from core.database import SessionLocal
from typing import Annotated
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session
from starlette import status
from core.exceptions import InvalidTokenError
from models.auth_tokens import AuthToken
from services.token_service import TokenService
from utils.logger import get_logger

logger = get_logger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


def get_bearer_secret(authorization: Annotated[str | None, Header()] = None) -> str:
    scheme, _, secret = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secret.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Not authenticated",
                            headers={"WWW-Authenticate": "Bearer"})
    return secret.strip()

secret_dependency = Annotated[str, Depends(get_bearer_secret)]


def get_current_token(secret: secret_dependency, db: db_dependency) -> AuthToken:
    """
    Authenticate the request against the token store.

    A missing, revoked or expired token always yields 401; there is no
    anonymous fallback.
    """
    try:
        return TokenService.validate_token(db, secret)
    except InvalidTokenError as e:
        logger.debug("Rejected bearer token", extra={"reason": type(e).__name__})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Could not validate credentials.",
                            headers={"WWW-Authenticate": "Bearer"})


token_dependency = Annotated[AuthToken, Depends(get_current_token)]
