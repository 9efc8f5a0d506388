"""
Rate Limiting Middleware

Provides fingerprint-based rate limiting that combines IP, User-Agent and the
bearer token prefix, so staff sharing a shop IP do not throttle each other.
"""
import hashlib
import logging
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from repairdesk.config import settings

logger = logging.getLogger(__name__)


# Rate limits by operation type
RATE_LIMITS = {
    "default": "100/minute",
    "login": "10/minute",       # Credential guessing
    "read": "120/minute",       # Read-only operations
    "write": "30/minute",       # Ticket / customer writes
    "message": "10/minute",     # Outbound customer messages
}


def get_rate_limit_key(request: Request) -> str:
    """
    Generate a rate limit key based on client fingerprint.

    Creates a unique key by combining:
    - IP address (primary identifier)
    - User-Agent (first 50 chars to limit size)
    - Bearer token prefix (last 16 chars of the header, never the full token)

    Args:
        request: FastAPI request object

    Returns:
        MD5 hash of the combined fingerprint
    """
    ip = get_remote_address(request)
    user_agent = request.headers.get("User-Agent", "")[:50]
    token_hint = request.headers.get("Authorization", "")[-16:]

    fingerprint = f"{ip}:{user_agent}:{token_hint}"
    hashed_key = hashlib.md5(fingerprint.encode()).hexdigest()

    logger.debug(f"Rate limit key generated for IP {ip}: {hashed_key[:8]}...")

    return hashed_key


def get_rate_limit(operation_type: str) -> str:
    """
    Get the rate limit string for a specific operation type.

    Args:
        operation_type: Type of operation (e.g., 'login', 'read', 'write')

    Returns:
        Rate limit string (e.g., '30/minute')
    """
    return RATE_LIMITS.get(operation_type, RATE_LIMITS["default"])


# Shared limiter: main.py installs it on the app, routes decorate with it
limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[RATE_LIMITS["default"]],
    enabled=settings.rate_limit_enabled,
)
