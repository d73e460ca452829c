"""
StackIt Backend — Actor Dependencies
======================================

What:  FastAPI dependencies that turn a bearer token into the acting User.
How:   `Authorization: Bearer <jwt>` is resolved to a live User row by
       AuthService. The resulting User is then passed explicitly into every
       service call.

    get_optional_user  → User | None  (public routes that behave differently when signed in)
    get_current_user   → User         (401 without a valid token, 403 when banned)
    require_admin      → User         (403 unless admin)
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.exceptions import AuthenticationError, ForbiddenError
from stackit.models.user import User
from stackit.services.auth_service import auth_service, is_admin

bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """Invalid or missing tokens, and banned users, are treated as anonymous."""
    if credentials is None:
        return None
    try:
        user = await auth_service.resolve_token(db, credentials.credentials)
    except AuthenticationError:
        return None
    return None if user.is_banned else user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None:
        raise AuthenticationError("No token, authorization denied")
    user = await auth_service.resolve_token(db, credentials.credentials)
    if user.is_banned:
        raise ForbiddenError("Account is banned")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise ForbiddenError("Admin access required")
    return user
