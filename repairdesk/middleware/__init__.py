"""
Middleware for authentication, authorization, rate limiting and CORS
"""
from .auth import get_current_user, require_capability, bearer_scheme
from .rate_limiter import get_rate_limit_key, RATE_LIMITS, get_rate_limit, limiter
from .cors import get_cors_origins

__all__ = [
    # Authentication
    "get_current_user",
    "require_capability",
    "bearer_scheme",
    # Rate Limiting
    "get_rate_limit_key",
    "RATE_LIMITS",
    "get_rate_limit",
    "limiter",
    # CORS
    "get_cors_origins",
]
