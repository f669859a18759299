"""Auth router — login, registration, current user profile."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from leave_management.auth.dependencies import get_current_user
from leave_management.auth.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenPayload,
    UserOut,
)
from leave_management.auth.service import (
    authenticate,
    generate_token,
    get_user_or_404,
    register_user,
)
from leave_management.common.exceptions import AuthenticationException
from leave_management.common.rate_limit import limiter
from leave_management.config import settings
from leave_management.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["auth"])


# ── POST /login ─────────────────────────────────────────────────────

@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate(db, body.email, body.password)
    if user is None:
        logger.warning("Failed login for %s", body.email)
        raise AuthenticationException("Invalid email or password.")

    logger.info("User %s logged in", user.id)
    return AuthResponse(
        message="Login successful",
        token=generate_token(user),
        user=UserOut.model_validate(user),
    )


# ── POST /register ──────────────────────────────────────────────────

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await register_user(db, body)
    return AuthResponse(
        message="User created successfully",
        token=generate_token(user),
        user=UserOut.model_validate(user),
    )


# ── GET /me — Current user profile ─────────────────────────────────

@router.get("/me", response_model=UserOut)
async def me(
    current_user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_or_404(db, current_user.user_id)
    return UserOut.model_validate(user)
