"""
Staff login and session endpoints
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from repairdesk.api.dependencies import get_user_repository
from repairdesk.database import UserRepository
from repairdesk.middleware.auth import get_current_user
from repairdesk.middleware.rate_limiter import get_rate_limit, limiter
from repairdesk.models import AuthContext, LoginRequest, LoginResponse, PublicUser, User
from repairdesk.utils.jwt_handler import create_jwt_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(get_rate_limit("login"))
async def login(
    request: Request,
    payload: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
) -> LoginResponse:
    """
    Authenticate a staff member and issue a JWT

    The same error is returned for an unknown user, a wrong password and a
    role mismatch.

    Returns:
        Public user profile and bearer token
    """
    user = await users.get_by_username(payload.username)
    if (
        user is None
        or not User.verify_password(payload.password, user.password_hash)
        or user.role != payload.role
    ):
        logger.warning(f"Failed login for {payload.username} as {payload.role.value}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    token = create_jwt_token(user.id, user.username, user.role.value)
    logger.info(f"User {user.id} logged in as {user.role.value}")
    return LoginResponse(user=user.public(), token=token)


@router.post("/verify", response_model=PublicUser)
async def verify(
    current_user: AuthContext = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> PublicUser:
    """Return the profile behind the bearer token"""
    user = await users.get(current_user.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user.public()


@router.post("/logout")
async def logout(current_user: AuthContext = Depends(get_current_user)) -> Dict[str, str]:
    # Tokens are stateless; the client discards its copy
    logger.info(f"User {current_user.user_id} logged out")
    return {"message": "Logged out successfully"}
