"""Auth dependencies — bearer-token validation, role enforcement."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request

from leave_management.auth.schemas import TokenPayload
from leave_management.auth.service import verify_token
from leave_management.common.constants import UserRole
from leave_management.common.exceptions import AuthenticationException, ForbiddenException


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthenticationException("Access token required.")
    token = auth_header[7:].strip()
    if not token:
        raise AuthenticationException("Access token required.")
    return token


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(request: Request) -> TokenPayload:
    """Validate the bearer JWT and return its claims.

    Stateless: the identity comes from the signed claims, no DB round trip.
    """
    claims = verify_token(_extract_bearer(request))
    request.state.user_role = claims.role
    return claims


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership."""

    async def _check(
        current_user: TokenPayload = Depends(get_current_user),
    ) -> TokenPayload:
        if current_user.role not in allowed_roles:
            raise ForbiddenException(
                detail=f"Role '{current_user.role.value}' is not permitted. Required: {[r.value for r in allowed_roles]}.",
            )
        return current_user

    return _check


require_admin = require_role(UserRole.admin)
