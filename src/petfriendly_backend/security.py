"""
Password hashing, JWT issuance/validation and the request-scoped current user.

Tokens are HS256 JWTs carrying the user's email as ``sub`` plus ``role`` and
``uid`` claims. Validation happens once per request in
``middleware.SecurityMiddleware``; routes read the authenticated user from
``request.state.user`` through ``get_current_user``.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from jose import JWTError, jwt
from passlib.context import CryptContext

from .configuration import get_settings
from .entities import User
from .models import Role
from .utils import utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


class TokenError(Exception):
    """A bearer token is missing, malformed, expired or badly signed."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        # Unknown or corrupt hash format
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    now = utcnow()
    expire = now + (expires_delta or timedelta(minutes=int(settings.security.jwt_expiration_minutes)))
    claims = {
        "sub": user.email,
        "uid": user.id,
        "role": user.role.value,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, settings.security.jwt_secret, algorithm=settings.security.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.security.jwt_secret, algorithms=[settings.security.jwt_algorithm])
    except JWTError as exc:
        raise TokenError(str(exc)) from exc
    if not claims.get("sub"):
        raise TokenError("Token has no subject")
    return claims


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user(request: Request) -> User:
    """Dependency returning the authenticated user; 401 when there is none."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


def is_admin(user: User) -> bool:
    return user.role in (Role.FOUNDATION_ADMIN, Role.SUPER_ADMIN)


def require_roles(*roles: Role):
    """Dependency factory restricting a route to the given roles."""

    def dependency(request: Request) -> User:
        user = get_current_user(request)
        if user.role not in roles:
            logger.warning(f"User {user.email} ({user.role.value}) lacks role for {request.url.path}")
            raise HTTPException(status_code=403, detail="Access denied")
        return user

    return dependency
