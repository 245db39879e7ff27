"""
Repository for the ``authtoken`` table.

Every method is a single statement against the database. Isolation between
concurrent requests and the cleanup sweep is left to the database engine;
nothing here locks or caches. Storage errors roll back the session and
propagate unchanged.
"""

import time
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import TokenNotFoundError
from models.auth_tokens import AuthToken, RememberFlag, TokenType
from utils.logger import get_logger, log_database_query

logger = get_logger(__name__)

# Abuse guard: a user with runaway session creation must not be able to
# force unbounded result sets.
MAX_TOKENS_PER_USER = 1000


class AuthTokenRepository:
    """Gateway between token intents and persisted rows."""

    def __init__(self, db: Session):
        self.db = db

    def insert(self, token: AuthToken) -> AuthToken:
        """Persist a new token and return it with its generated id."""
        start = time.perf_counter()
        try:
            self.db.add(token)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(token)
        self._log("INSERT", start, 1, token_id=token.id, uid=token.uid)
        return token

    def update(self, token: AuthToken) -> AuthToken:
        """Flush attribute changes of an already persisted token."""
        start = time.perf_counter()
        try:
            self.db.add(token)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self._log("UPDATE", start, token_id=token.id)
        return token

    def update_activity(self, token: AuthToken, now: int, interval: int = 0) -> None:
        """
        Bump ``last_activity`` to ``now`` unless it was already bumped within
        ``interval`` seconds. Deleted rows are simply not updated.
        """
        start = time.perf_counter()
        rows = self._update(
            self.db.query(AuthToken).filter(
                AuthToken.id == token.id,
                AuthToken.last_activity < now - interval,
            ),
            {AuthToken.last_activity: now},
        )
        self._log("UPDATE", start, rows, token_id=token.id)

    def invalidate(self, token: str) -> None:
        """
        Invalidate (delete) a given token.

        Deleting a token that is already gone is not an error.
        """
        start = time.perf_counter()
        rows = self._delete(self.db.query(AuthToken).filter(AuthToken.token == token))
        self._log("DELETE", start, rows, predicate="token")

    def invalidate_old(self, older_than: int, remember: RememberFlag = RememberFlag.DO_NOT_REMEMBER) -> None:
        """
        Delete temporary tokens idle since before ``older_than``.

        Only rows whose remember flag equals ``remember`` are touched, and
        persistent tokens never are.
        """
        start = time.perf_counter()
        rows = self._delete(
            self.db.query(AuthToken).filter(
                AuthToken.last_activity < older_than,
                AuthToken.type == int(TokenType.TEMPORARY),
                AuthToken.remember == int(remember),
            )
        )
        self._log(
            "DELETE", start, rows,
            predicate="invalidate_old", older_than=older_than, remember=int(remember),
        )

    def invalidate_expired(self, now: int) -> None:
        """
        Delete every token whose absolute expiry lies before ``now``,
        whatever its type or remember flag.
        """
        start = time.perf_counter()
        rows = self._delete(
            self.db.query(AuthToken).filter(
                AuthToken.expires.isnot(None),
                AuthToken.expires < now,
            )
        )
        self._log("DELETE", start, rows, predicate="expired", now=now)

    def get_token(self, token: str) -> AuthToken:
        """
        Get the token row for a secret lookup value.

        Raises:
            TokenNotFoundError: no row matches
        """
        start = time.perf_counter()
        row = self.db.query(AuthToken).filter(AuthToken.token == token).first()
        self._log("SELECT", start, predicate="token")
        if row is None:
            raise TokenNotFoundError()
        return row

    def get_token_by_id(self, token_id: int) -> AuthToken:
        """
        Get the token row with the given id.

        Raises:
            TokenNotFoundError: no row matches
        """
        start = time.perf_counter()
        row = self.db.query(AuthToken).filter(AuthToken.id == token_id).first()
        self._log("SELECT", start, token_id=token_id)
        if row is None:
            raise TokenNotFoundError()
        return row

    def get_token_by_user(self, uid: str) -> List[AuthToken]:
        """
        Get all tokens of a user.

        The result is capped at MAX_TOKENS_PER_USER rows; a truncated list is
        a valid answer, not an error.
        """
        start = time.perf_counter()
        rows = (
            self.db.query(AuthToken)
            .filter(AuthToken.uid == uid)
            .order_by(AuthToken.id)
            .limit(MAX_TOKENS_PER_USER)
            .all()
        )
        self._log("SELECT", start, len(rows), uid=uid)
        return rows

    def delete_by_id(self, uid: str, token_id: int) -> None:
        """
        Delete a token only if it belongs to ``uid``.

        Both predicates go into the same statement so a guessed id cannot
        revoke somebody else's session.
        """
        start = time.perf_counter()
        rows = self._delete(self.db.query(AuthToken).filter(AuthToken.id == token_id, AuthToken.uid == uid))
        self._log("DELETE", start, rows, token_id=token_id, uid=uid)

    def delete_by_name(self, name: str) -> None:
        """
        Delete every token issued to client ``name``, for all users.

        Used when a client integration is removed system-wide.
        """
        start = time.perf_counter()
        rows = self._delete(self.db.query(AuthToken).filter(AuthToken.name == name))
        self._log("DELETE", start, rows, client_name=name)

    def _delete(self, query) -> int:
        try:
            rows = query.delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return rows

    def _update(self, query, values) -> int:
        try:
            rows = query.update(values, synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return rows

    def _log(self, query_type: str, start: float, rows=None, **context):
        log_database_query(
            logger,
            query_type,
            AuthToken.__tablename__,
            (time.perf_counter() - start) * 1000,
            rows_affected=rows,
            extra=context,
        )
