"""
StackIt Backend — Authentication Service
==========================================

What:  Registration, credential checks and access-token handling.
How:   bcrypt password hashes (passlib), HS256 JWTs (PyJWT) carrying the user
       id in `sub`. Tokens are resolved back to a live User row on every
       request so bans and role changes take effect immediately.
Who:   Auth routes, the actor dependencies in routes/deps.py and the
       WebSocket endpoint.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from passlib.context import CryptContext
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.config import settings
from stackit.exceptions import AuthenticationError, ConflictError, ForbiddenError
from stackit.models.user import User, UserRole
from stackit.schemas.user import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user: User, minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=minutes or settings.jwt_expire_minutes)
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID:
    """Returns the user id carried by a valid token."""
    try:
        data = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    try:
        return UUID(str(data.get("sub")))
    except ValueError:
        raise AuthenticationError("Invalid token")


def is_admin(user: User) -> bool:
    """Admins are users with the admin role, plus the configured ADMIN_EMAIL account."""
    if user.role == UserRole.ADMIN.value:
        return True
    return settings.admin_email is not None and user.email == settings.admin_email


class AuthService:
    """Stateless; every method receives the request's session."""

    async def register(self, db: AsyncSession, data: RegisterRequest) -> User:
        email = data.email.lower()
        result = await db.execute(
            select(User).where(
                or_(func.lower(User.username) == data.username.lower(), User.email == email)
            )
        )
        existing = result.scalars().first()
        if existing is not None:
            if existing.email == email:
                raise ConflictError("Email is already registered", context={"field": "email"})
            raise ConflictError("Username is already taken", context={"field": "username"})

        user = User(
            username=data.username,
            email=email,
            password_hash=hash_password(data.password),
            role=UserRole.USER.value,
        )
        db.add(user)
        await db.flush()
        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    async def authenticate(self, db: AsyncSession, data: LoginRequest) -> User:
        result = await db.execute(select(User).where(User.email == data.email.lower()))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        if user.is_banned:
            raise ForbiddenError(
                f"Account is banned: {user.ban_reason}" if user.ban_reason else "Account is banned",
            )
        return user

    async def resolve_token(self, db: AsyncSession, token: str) -> User:
        """Maps a bearer token to its User; missing users are treated as invalid tokens."""
        user_id = decode_access_token(token)
        user = await db.get(User, user_id)
        if user is None:
            raise AuthenticationError("Invalid token")
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
