"""
JWT token handler for staff authentication
"""
import jwt
from datetime import timedelta
from typing import Optional
from repairdesk.config import settings
from repairdesk.utils.clock import utcnow
import logging

logger = logging.getLogger(__name__)


def create_jwt_token(user_id: str, username: str, role: str) -> str:
    """
    Create JWT token for a logged-in staff member

    Args:
        user_id: User ID
        username: Login name
        role: frontdesk or technician

    Returns:
        JWT token string
    """
    now = utcnow()
    payload = {
        "user_id": user_id,
        "username": username,
        "role": role,
        "exp": now + timedelta(hours=settings.jwt_expiration_hours),
        "iat": now
    }

    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    logger.info(f"JWT token created for user {user_id} ({role})")
    return token


def verify_jwt_token(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload if valid, None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
        logger.debug(f"JWT token verified for user {payload.get('user_id')}")
        return payload
    except jwt.ExpiredSignatureError:
        logger.warning("JWT token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid JWT token: {str(e)}")
        return None
