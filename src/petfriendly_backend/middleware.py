"""
Route authorization for the whole application.

``ACCESS_RULES`` is an ordered table of (methods, path patterns, requirement)
evaluated first-match-wins. Patterns are Ant style: ``*`` matches one path
segment and a trailing ``/**`` matches the prefix itself or anything below it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Optional, Pattern, Tuple, Union

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from .entities import User
from .models import Role
from .security import TokenError, bearer_token, decode_access_token

logger = logging.getLogger(__name__)

PUBLIC = "public"
AUTHENTICATED = "authenticated"

Requirement = Union[str, FrozenSet[Role]]

ADMINS: FrozenSet[Role] = frozenset({Role.FOUNDATION_ADMIN, Role.SUPER_ADMIN})
SUPER_ADMIN_ONLY: FrozenSet[Role] = frozenset({Role.SUPER_ADMIN})


def compile_pattern(pattern: str) -> Pattern[str]:
    """Translate an Ant style path pattern into an anchored regex."""
    remainder = ""
    if pattern.endswith("/**"):
        pattern = pattern[:-3]
        remainder = r"(?:/.*)?"
    body = re.escape(pattern).replace(r"\*", "[^/]+")
    return re.compile(f"^{body}{remainder}$")


@dataclass(frozen=True)
class AccessRule:
    methods: Optional[FrozenSet[str]]
    patterns: Tuple[Pattern[str], ...]
    requirement: Requirement

    @classmethod
    def of(cls, methods: Optional[Iterable[str]], patterns: Iterable[str], requirement: Requirement) -> "AccessRule":
        return cls(
            methods=frozenset(methods) if methods else None,
            patterns=tuple(compile_pattern(pattern) for pattern in patterns),
            requirement=requirement,
        )

    def matches(self, method: str, path: str) -> bool:
        if self.methods is not None and method not in self.methods:
            return False
        return any(pattern.match(path) for pattern in self.patterns)


ACCESS_RULES: Tuple[AccessRule, ...] = (
    AccessRule.of(None, ["/api/v1/auth/**", "/api/v1/public/**"], PUBLIC),
    AccessRule.of(["GET"], ["/api/v1/pets/**", "/api/v1/foundations/**", "/api/v1/pet-images/**"], PUBLIC),
    AccessRule.of(["POST"], ["/api/v1/contact-messages"], PUBLIC),
    AccessRule.of(["POST"], ["/api/v1/users/register"], PUBLIC),
    AccessRule.of(None, ["/v3/api-docs/**", "/swagger-ui/**", "/swagger-ui.html", "/uploads/**"], PUBLIC),
    AccessRule.of(None, ["/actuator/health", "/actuator/info"], PUBLIC),
    AccessRule.of(["GET", "PUT", "DELETE"], ["/api/v1/users/profile"], AUTHENTICATED),
    AccessRule.of(["POST"], ["/api/v1/adoption-requests"], AUTHENTICATED),
    AccessRule.of(["GET"], ["/api/v1/adoption-requests/user/**"], AUTHENTICATED),
    AccessRule.of(["PUT"], ["/api/v1/adoption-requests/*/cancel"], AUTHENTICATED),
    AccessRule.of(
        ["POST", "PUT", "DELETE"],
        ["/api/v1/foundations/**", "/api/v1/pets/**", "/api/v1/pet-images/**"],
        ADMINS,
    ),
    AccessRule.of(["PUT"], ["/api/v1/adoption-requests/*/approve", "/api/v1/adoption-requests/*/reject"], ADMINS),
    AccessRule.of(["GET"], ["/api/v1/adoption-requests/pet/**"], ADMINS),
    AccessRule.of(["DELETE"], ["/api/v1/adoption-requests/**"], ADMINS),
    AccessRule.of(["GET", "PUT", "DELETE"], ["/api/v1/contact-messages/**"], ADMINS),
    AccessRule.of(["GET", "PUT", "DELETE"], ["/api/v1/users/**"], SUPER_ADMIN_ONLY),
    AccessRule.of(None, ["/api/v1/admin/**"], SUPER_ADMIN_ONLY),
    AccessRule.of(None, ["/**"], AUTHENTICATED),
)


def resolve_requirement(method: str, path: str) -> Requirement:
    """Return the requirement of the first rule matching the request."""
    method = method.upper()
    # HEAD existence checks follow the GET rules.
    if method == "HEAD":
        method = "GET"
    if len(path) > 1:
        path = path.rstrip("/")
    for rule in ACCESS_RULES:
        if rule.matches(method, path):
            return rule.requirement
    return AUTHENTICATED


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Authenticates the bearer token and enforces ``ACCESS_RULES``.

    ``user_loader`` maps a token subject (email) to a stored user. Unknown or
    inactive users are treated as unauthenticated. The resolved user, if any,
    is stored on ``request.state.user`` for the routes.
    """

    def __init__(self, app, user_loader: Callable[[str], Optional[User]]):
        super().__init__(app)
        self.user_loader = user_loader

    def _authenticate(self, request: Request) -> Optional[User]:
        token = bearer_token(request)
        if token is None:
            return None
        try:
            claims = decode_access_token(token)
        except TokenError as exc:
            logger.warning(f"Rejected bearer token on {request.method} {request.url.path}: {exc}")
            return None
        user = self.user_loader(claims["sub"])
        if user is None or not user.active:
            logger.warning(f"Token subject {claims['sub']} is unknown or inactive")
            return None
        return user

    async def dispatch(self, request: Request, call_next):
        request.state.user = None
        if request.method == "OPTIONS":
            return await call_next(request)

        requirement = resolve_requirement(request.method, request.url.path)
        user = await run_in_threadpool(self._authenticate, request)
        request.state.user = user

        if requirement == PUBLIC:
            return await call_next(request)
        if user is None:
            return JSONResponse(status_code=401, content={"detail": "Authentication required"})
        if requirement != AUTHENTICATED and user.role not in requirement:
            logger.warning(f"User {user.email} ({user.role.value}) denied {request.method} {request.url.path}")
            return JSONResponse(status_code=403, content={"detail": "Access denied"})
        return await call_next(request)
