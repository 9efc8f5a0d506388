"""
Bearer token authentication and role capability checks
"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from repairdesk.models import AuthContext
from repairdesk.security.permissions import Operation, is_allowed
from repairdesk.utils.jwt_handler import verify_jwt_token
import logging

logger = logging.getLogger(__name__)

# Define bearer scheme (missing header handled below for a consistent message)
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthContext:
    """
    Validates the bearer token and returns the caller's identity.

    Args:
        credentials: Authorization header parsed by HTTPBearer

    Returns:
        AuthContext with user_id, username and role

    Raises:
        HTTPException 401: If the token is missing
        HTTPException 403: If the token is invalid or expired
    """
    if credentials is None or not credentials.credentials:
        logger.warning("API request without bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = verify_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token"
        )

    try:
        return AuthContext(**payload)
    except ValidationError:
        logger.warning("Bearer token payload is missing identity claims")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token"
        )


def require_capability(operation: Operation):
    """
    Build a dependency that only lets through roles allowed to perform operation

    Usage:
        @router.get("/reports")
        async def reports(user: AuthContext = Depends(require_capability(Operation.VIEW_REPORTS))):
            ...
    """
    async def _check(user: AuthContext = Depends(get_current_user)) -> AuthContext:
        if not is_allowed(user.role, operation):
            logger.warning(f"User {user.user_id} ({user.role.value}) denied {operation.value}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return user

    return _check
