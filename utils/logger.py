"""
Logging utility functions and helpers.
"""

import logging
from typing import Any, Dict, Optional

REDACTED = "***REDACTED***"

# Keys whose values must never reach a log sink. Token ids are fine,
# the token value (or its hash) is not.
SENSITIVE_KEYS = {
    'token', 'token_hash', 'secret', 'password', 'private_key',
    'authorization', 'api_key', 'access_token', 'refresh_token',
}
SENSITIVE_SUFFIXES = ('_secret', '_password', '_token')

SLOW_QUERY_MS = 1000


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def _is_sensitive(key: str) -> bool:
    key = key.lower()
    return key in SENSITIVE_KEYS or key.endswith(SENSITIVE_SUFFIXES)


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remove credential material from a dict before it is logged.

    Sensitive values are replaced wholesale; unlike request payloads a token
    store must not leak even a prefix of a secret. Nested dicts are
    sanitized recursively.
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        if isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)
        elif _is_sensitive(key) and value is not None:
            sanitized[key] = REDACTED

    return sanitized


def log_request(
    logger: logging.Logger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    client_ip: str = "unknown",
    extra: Optional[Dict[str, Any]] = None
):
    """
    Log an HTTP request in a structured format.

    Usage:
        log_request(logger, "GET", "/tokens", 200, 4.2, client_ip="10.0.0.1")
    """
    log_data = {
        "http_method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
        "client_ip": client_ip,
    }

    if extra:
        log_data.update(sanitize_log_data(extra))

    message = f'{client_ip} - "{method} {path}" {status_code}'
    if status_code >= 500:
        logger.error(message, extra=log_data)
    elif status_code >= 400:
        logger.warning(message, extra=log_data)
    else:
        logger.info(message, extra=log_data)


def log_database_query(
    logger: logging.Logger,
    query_type: str,
    table: str,
    duration_ms: float,
    rows_affected: Optional[int] = None,
    extra: Optional[Dict[str, Any]] = None
):
    """
    Log a database statement in a structured format.

    Statements are logged at DEBUG; anything slower than one second is
    promoted to WARNING.

    Args:
        logger: Logger instance
        query_type: Type of query (SELECT, INSERT, UPDATE, DELETE)
        table: Table name
        duration_ms: Statement duration in milliseconds
        rows_affected: Number of rows affected (for INSERT/UPDATE/DELETE)
        extra: Additional non-secret context (ids, uids, predicates)
    """
    log_data = {
        "query_type": query_type,
        "table": table,
        "duration_ms": round(duration_ms, 2)
    }

    if rows_affected is not None:
        log_data["rows_affected"] = rows_affected

    if extra:
        log_data.update(sanitize_log_data(extra))

    if duration_ms > SLOW_QUERY_MS:
        logger.warning(f"Slow {query_type} query on {table}", extra=log_data)
    else:
        logger.debug(f"{query_type} query on {table}", extra=log_data)
