"""Auth service — password hashing, JWT management, user storage."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leave_management.auth.models import User
from leave_management.auth.schemas import RegisterRequest, TokenPayload
from leave_management.common.constants import UserRole
from leave_management.common.exceptions import (
    AuthenticationException,
    ConflictError,
    NotFoundException,
)
from leave_management.config import settings

logger = logging.getLogger(__name__)

# How the username unique violation is reported by SQLite and PostgreSQL
USERNAME_CONSTRAINT_KEYS = ("users.username", "(username)")

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ── Passwords ───────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# ── JWT helpers ─────────────────────────────────────────────────────

def generate_token(user: User) -> str:
    """Issue an access token carrying the caller's id, email and role."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "userId": user.id,
        "email": user.email,
        "role": user.role.value,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> TokenPayload:
    """Decode and validate an access token, or raise a 401."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise AuthenticationException("Token has expired.")
    except JWTError:
        raise AuthenticationException("Invalid token.")

    try:
        return TokenPayload.model_validate(payload)
    except ValidationError:
        raise AuthenticationException("Invalid token claims.")


# ── User lookup ─────────────────────────────────────────────────────

async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalars().first()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalars().first()


async def get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await get_user(db, user_id)
    if user is None:
        raise NotFoundException(entity_type="User", entity_id=user_id)
    return user


# ── Registration / login ────────────────────────────────────────────

async def create_user(
    db: AsyncSession,
    *,
    username: str,
    email: str,
    password: str,
    role: UserRole = UserRole.employee,
) -> User:
    """Insert a user with a hashed password. Unique violations surface as 409."""
    email = email.lower()
    user = User(
        username=username,
        email=email,
        password=hash_password(password),
        role=role,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration; the caller's session
        # is rolled back by get_db when this propagates.
        if any(key in str(exc.orig) for key in USERNAME_CONSTRAINT_KEYS):
            raise ConflictError(field="username", value=username)
        raise ConflictError(field="email", value=email)
    return user


async def register_user(db: AsyncSession, data: RegisterRequest) -> User:
    """Create a new account, refusing duplicate email or username."""
    result = await db.execute(
        select(User).where(
            or_(
                func.lower(User.email) == data.email.lower(),
                User.username == data.username,
            ),
        ),
    )
    existing = result.scalars().first()
    if existing is not None:
        if existing.email.lower() == data.email.lower():
            raise ConflictError(field="email", value=data.email)
        raise ConflictError(field="username", value=data.username)

    user = await create_user(
        db,
        username=data.username,
        email=data.email,
        password=data.password,
        role=data.role or UserRole.employee,
    )
    logger.info("Registered user %s (%s) as %s", user.id, user.email, user.role.value)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """Return the user when the password verifies against the stored hash."""
    user = await get_user_by_email(db, email)
    if user is None:
        return None
    if not verify_password(password, user.password):
        return None
    return user
