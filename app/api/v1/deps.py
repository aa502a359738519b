"""
FastAPI dependencies: identity guards, database session, clock, blob store.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import decode_access_token
from app.db.session import async_session_factory
from app.schemas.identity import Identity
from app.services.clock import utcnow
from app.services.photos import BlobStore, LocalBlobStore

# auto_error=False so we can fall back to the cookie when the header is missing
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Clock / blob store (overridable in tests) ──────────────────────
def get_now() -> datetime:
    return utcnow()


def get_blob_store() -> BlobStore:
    return LocalBlobStore(settings.PHOTO_STORAGE_DIR, settings.PHOTO_BASE_URL)


# ── Identity dependencies ───────────────────────────────────────────
async def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
) -> Identity:
    """Decode the identity provider's JWT from Header OR Cookie."""
    final_token = token
    if not final_token and access_token:
        if access_token.startswith("Bearer "):
            final_token = access_token.split(" ", 1)[1]
        else:
            final_token = access_token

    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not final_token:
        raise credentials_exc

    payload = decode_access_token(final_token)
    if payload is None or not payload.get("sub"):
        raise credentials_exc

    try:
        return Identity(
            staff_id=payload["sub"],
            role=payload.get("role", ""),
            franchise_id=payload.get("franchise_id"),
            franchise_name=payload.get("franchise_name"),
            name=payload.get("name"),
            employee_id=payload.get("employee_id"),
        )
    except ValidationError:
        raise credentials_exc from None


async def require_staff(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Only staff-tier identities may mark attendance."""
    if not identity.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only franchise staff can mark attendance",
        )
    return identity


async def require_manager(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Admins and franchise owners (an owner must name their franchise)."""
    if identity.is_admin:
        return identity
    if not (identity.is_franchise_owner and identity.franchise_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return identity
