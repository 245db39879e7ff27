"""
Domain errors raised by the token store.

Only a failed exact-match lookup is a domain error. Storage failures
(sqlalchemy.exc.SQLAlchemyError) are never wrapped so they reach the caller
unchanged.
"""


class InvalidTokenError(Exception):
    """The presented credential does not represent a valid session."""


class TokenNotFoundError(InvalidTokenError):
    """
    No token row matched an exact-match lookup.

    Expected on every forged, revoked or swept token. Callers treat it as a
    normal negative authentication result.
    """

    def __init__(self, message: str = "token does not exist"):
        super().__init__(message)


class TokenExpiredError(InvalidTokenError):
    """
    The token's absolute expiry has passed. The row is deleted before this
    is raised, so only its id is carried.
    """

    def __init__(self, token_id: int):
        super().__init__("token has expired")
        self.token_id = token_id
