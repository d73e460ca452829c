"""
StackIt Backend — Auth Route Handlers
=======================================

What:  POST /api/auth/register, POST /api/auth/login, GET /api/auth/me.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackit.database import get_db_session
from stackit.models.user import User
from stackit.routes.deps import get_current_user
from stackit.schemas.common import ErrorResponse
from stackit.schemas.user import (
    AccountResponse,
    AccountView,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
)
from stackit.services.auth_service import auth_service, create_access_token

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Username or email taken", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user = await auth_service.register(db, body)
    return AuthResponse(
        message="User registered successfully",
        token=create_access_token(user),
        user=AccountView.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        403: {"description": "Account banned", "model": ErrorResponse},
    },
    summary="Exchange credentials for a token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user = await auth_service.authenticate(db, body)
    return AuthResponse(
        message="Login successful",
        token=create_access_token(user),
        user=AccountView.model_validate(user),
    )


@router.get("/me", response_model=AccountResponse, summary="The signed-in account")
async def me(user: User = Depends(get_current_user)) -> AccountResponse:
    return AccountResponse(user=AccountView.model_validate(user))
