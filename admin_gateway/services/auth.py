"""Auth gate and role guard for the admin API.

Every request must carry a **Bearer** JWT (HS256) issued by the admin login
service. The decoded claims become an :class:`AdminIdentity`; the role guard
then decides whether that identity may touch user files at all.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from loguru import logger
from pydantic import ValidationError

from admin_gateway.config import settings
from admin_gateway.models.auth import AdminIdentity, SUPER_ADMIN


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

_JWT_SECRET = settings.ADMIN_JWT_SECRET
_JWT_ALGO = "HS256"


# ---------------------------------------------------------------------------
# Security scheme for FastAPI docs
# ---------------------------------------------------------------------------

_bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def create_token(identity: AdminIdentity, *, ttl_sec: int = 3600) -> str:  # noqa: D401
    """Issue an HS256 token carrying *identity* (dev tooling and tests)."""
    payload = {
        **identity.model_dump(exclude_none=True),
        "exp": int(datetime.now(tz=timezone.utc).timestamp() + ttl_sec),
    }
    return jwt.encode(payload, _JWT_SECRET, algorithm=_JWT_ALGO)


async def get_current_admin(
    creds: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> AdminIdentity:  # noqa: D401
    """FastAPI dependency that validates the JWT and returns the caller."""

    if creds is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided or invalid format",
        )

    try:
        payload = jwt.decode(creds.credentials, _JWT_SECRET, algorithms=[_JWT_ALGO])
    except ExpiredSignatureError as exc:
        logger.warning("Rejected expired admin token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired") from exc
    except JWTError as exc:
        logger.warning("Rejected admin token: {}", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from exc

    try:
        return AdminIdentity.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Rejected admin token with malformed claims: {}", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from exc


def require_role(role: str) -> Callable[..., AdminIdentity]:
    """Build a dependency that admits only callers holding *role*.

    Attach it once at router level so every operation is covered before any
    handler (and therefore any downstream call) runs.
    """

    async def _guard(admin: Annotated[AdminIdentity, Depends(get_current_admin)]) -> AdminIdentity:
        if admin.role != role:
            logger.warning("Access denied: {} has role={!r}, needs {!r}", admin.label, admin.role, role)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied: {role.capitalize()} role required",
            )
        return admin

    return _guard


require_super_admin = require_role(SUPER_ADMIN)
