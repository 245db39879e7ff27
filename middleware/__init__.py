"""
Middleware package exports.
"""

from middleware.rate_limiter import limiter, get_token_key

__all__ = ["limiter", "get_token_key"]
