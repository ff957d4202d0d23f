"""
FastAPI dependencies: database session, role guards and the upstream client.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_access_token
from app.db.session import async_session_factory
from app.services.upstream import CafmClient

# Tokens come from the SSO service; tokenUrl is only used by the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="https://sso.zenapi.co.in/auth/login", auto_error=False
)


@dataclass(frozen=True)
class Principal:
    subject: str
    role: str
    token: str


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_principal(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
) -> Principal:
    """Read the SSO token from the Authorization header or the cookie."""
    final_token = token
    if not final_token and access_token:
        if access_token.startswith("Bearer "):
            final_token = access_token.split(" ", 1)[1]
        else:
            final_token = access_token

    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not final_token:
        raise credentials_exc

    payload = decode_access_token(final_token)
    if payload is None or payload.get("sub") is None:
        raise credentials_exc
    return Principal(subject=str(payload["sub"]), role=payload["role"], token=final_token)


def require_roles(*roles: str) -> Callable[..., Principal]:
    """Dependency factory: allow only the listed roles through."""

    async def _guard(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(roles)}",
            )
        return principal

    return _guard


REPORT_ROLES = ("admin", "manager", "hrd", "coordinator")
require_report_access = require_roles(*REPORT_ROLES)
require_calendar_admin = require_roles("admin", "hrd")


# ── Upstream client ─────────────────────────────────────────────────
async def get_cafm_client(
    principal: Principal = Depends(get_current_principal),
) -> AsyncGenerator[CafmClient, None]:
    """One CAFM client per request, forwarding the caller's token."""
    async with CafmClient(token=principal.token) as client:
        yield client


async def get_service_client() -> AsyncGenerator[CafmClient, None]:
    """Unauthenticated CAFM client for public checks such as /health."""
    async with CafmClient() as client:
        yield client
