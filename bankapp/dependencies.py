"""
FastAPI dependencies for authentication, authorization and feature flags.

Dependency chain:

  get_current_user (JWT -> User)
      └── require_admin (User -> User)          [admin only]

  get_feature_flags (session -> FeatureFlagStore)

Members reach their own accounts through get_current_user; every service
call made on their behalf is scoped by the user's id. Admins carry the
same identity plus the is_admin bit and may also use member endpoints.
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from bankapp.database import get_db
from bankapp.models.user import User
from bankapp.security import decode_access_token
from bankapp.services.feature_flag_service import FeatureFlagStore


# Tokens are issued elsewhere, so there's no login URL to advertise;
# auto_error=False lets us answer a missing header with 401 instead of 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extract and validate the bearer token, then return the corresponding User.

    Raises:
        HTTPException 401: Missing/invalid token, unknown or inactive user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        payload = decode_access_token(credentials.credentials)
        user_id_str: str | None = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        user_id = uuid.UUID(user_id_str)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise credentials_exception

    return user


async def require_admin(
    user: User = Depends(get_current_user),
) -> User:
    """
    Require the authenticated user to be an admin.

    Raises:
        HTTPException 403: If the user is not an admin.
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


async def get_feature_flags(
    db: AsyncSession = Depends(get_db),
) -> FeatureFlagStore:
    """The flag store bound to this request's session."""
    return FeatureFlagStore(db)
