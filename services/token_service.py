import secrets
import hashlib
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from core.config import settings
from core.exceptions import TokenExpiredError
from models.auth_tokens import AuthToken, RecoveryMaterial, RememberFlag, TokenType
from repositories.auth_token_repository import AuthTokenRepository
from utils.logger import get_logger

logger = get_logger(__name__)


def utc_timestamp() -> int:
    return int(datetime.now(timezone.utc).timestamp())


class TokenService:
    """
    Token policy on top of the repository: issuing, validating, revoking and
    sweeping login sessions and app-passwords.

    Secrets handed to clients are never stored. The ``token`` column holds
    their SHA-256 digest and every lookup hashes the presented value first.
    """

    @staticmethod
    def hash_token(secret: str) -> str:
        return hashlib.sha256(secret.encode()).hexdigest()

    @staticmethod
    def generate_token(
        db: Session,
        uid: str,
        login_name: str,
        name: str,
        token_type: TokenType = TokenType.TEMPORARY,
        remember: RememberFlag = RememberFlag.DO_NOT_REMEMBER,
        recovery_material: Optional[RecoveryMaterial] = None,
        expires: Optional[int] = None,
    ) -> Tuple[str, AuthToken]:
        """
        Issue a new token for a user who has just authenticated.

        Args:
            db: Database session
            uid: Owning user id
            login_name: Name the user logged in with
            name: Client/device label, e.g. "Mobile app"
            token_type: TEMPORARY sessions are swept when idle, PERSISTENT ones are not
            remember: REMEMBER sessions get the longer "remember me" lifetime
            recovery_material: Opaque keypair and encrypted credential, makes
                this a credential-recovery token
            expires: Absolute expiry (unix seconds), None for no hard expiry

        Returns:
            Tuple of (secret, persisted token). The secret is only ever
            available here.
        """
        secret = secrets.token_urlsafe(settings.TOKEN_BYTES)
        now = utc_timestamp()

        token = AuthToken(
            uid=uid,
            login_name=login_name,
            name=name,
            token=TokenService.hash_token(secret),
            type=int(token_type),
            remember=int(remember),
            last_activity=now,
            last_check=now,
            expires=expires,
        )
        token.recovery_material = recovery_material

        AuthTokenRepository(db).insert(token)

        logger.info(
            "Token issued",
            extra={
                "token_id": token.id,
                "uid": uid,
                "client_name": name,
                "token_type": int(token_type),
                "recoverable": token.can_recover_credentials,
            }
        )
        return secret, token

    @staticmethod
    def get_token(db: Session, secret: str) -> AuthToken:
        """
        Resolve a presented secret to its token.

        Raises:
            TokenNotFoundError: no live token for this secret
            TokenExpiredError: the token's absolute expiry has passed
        """
        repository = AuthTokenRepository(db)
        token = repository.get_token(TokenService.hash_token(secret))

        if token.is_expired(utc_timestamp()):
            # Capture the id before the delete expires the instance
            token_id = token.id
            repository.invalidate(token.token)
            logger.info("Expired token invalidated", extra={"token_id": token_id})
            raise TokenExpiredError(token_id)

        return token

    @staticmethod
    def validate_token(db: Session, secret: str) -> AuthToken:
        """
        Authenticate a request: look the token up and record the activity.

        ``last_activity`` is written at most once per
        ACTIVITY_UPDATE_INTERVAL_SECONDS per token.
        """
        token = TokenService.get_token(db, secret)
        AuthTokenRepository(db).update_activity(
            token,
            utc_timestamp(),
            settings.ACTIVITY_UPDATE_INTERVAL_SECONDS
        )
        return token

    @staticmethod
    def get_token_by_id(db: Session, token_id: int) -> AuthToken:
        return AuthTokenRepository(db).get_token_by_id(token_id)

    @staticmethod
    def get_user_tokens(db: Session, uid: str) -> List[AuthToken]:
        return AuthTokenRepository(db).get_token_by_user(uid)

    @staticmethod
    def invalidate_token(db: Session, secret: str):
        """
        Revoke a token by its secret (logout). Already gone is fine.
        """
        AuthTokenRepository(db).invalidate(TokenService.hash_token(secret))
        logger.info("Token invalidated")

    @staticmethod
    def invalidate_token_by_id(db: Session, uid: str, token_id: int):
        """
        Revoke one of ``uid``'s tokens. Ids owned by other users are ignored.
        """
        AuthTokenRepository(db).delete_by_id(uid, token_id)
        logger.info("Token invalidated by id", extra={"uid": uid, "token_id": token_id})

    @staticmethod
    def revoke_client_tokens(db: Session, name: str):
        """
        Revoke every token issued to a client integration, across all users.
        """
        AuthTokenRepository(db).delete_by_name(name)
        logger.info("Client tokens revoked", extra={"client_name": name})

    @staticmethod
    def invalidate_old_tokens(db: Session, now: Optional[int] = None):
        """
        Expiry sweep.

        Tokens past their absolute ``expires`` are removed whatever their
        type. Idle temporary sessions expire after SESSION_LIFETIME_SECONDS
        of inactivity, "remember me" sessions after
        REMEMBER_LOGIN_LIFETIME_SECONDS. Persistent tokens are never swept
        for inactivity.
        """
        if now is None:
            now = utc_timestamp()
        repository = AuthTokenRepository(db)

        logger.debug("Invalidating expired tokens", extra={"now": now})
        repository.invalidate_expired(now)

        older_than = now - settings.SESSION_LIFETIME_SECONDS
        logger.debug("Invalidating session tokens", extra={"older_than": older_than})
        repository.invalidate_old(older_than)

        remember_older_than = now - settings.REMEMBER_LOGIN_LIFETIME_SECONDS
        logger.debug("Invalidating remembered session tokens", extra={"older_than": remember_older_than})
        repository.invalidate_old(remember_older_than, RememberFlag.REMEMBER)
