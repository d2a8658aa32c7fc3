"""
Security middleware and access control.

Implements security headers for every response and HTTP basic
authentication with roles for the operational endpoints. The book resource
itself is public.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Optional

import bcrypt
from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from bookstore.config import Settings

logger = logging.getLogger(__name__)

SENSITIVE_PATH_MARKERS = ("/admin", "/auth", "/login", "/user", "/profile", "/actuator")

ROLE_ADMIN = "ADMIN"
ROLE_MONITOR = "MONITOR"

basic_auth = HTTPBasic(auto_error=False)


def security_headers(settings: Settings, path: str) -> Dict[str, str]:
    """
    Build the security headers for a response to ``path``.

    Sensitive paths additionally get no-cache headers.
    """
    headers = {
        "Content-Security-Policy": settings.content_security_policy,
        "X-Frame-Options": "DENY",
        "X-Content-Type-Options": "nosniff",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": settings.referrer_policy,
        "Permissions-Policy": settings.permissions_policy,
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
        "X-Permitted-Cross-Domain-Policies": "none",
        "Cross-Origin-Opener-Policy": "same-origin",
        "Cross-Origin-Resource-Policy": "same-origin",
    }
    if is_sensitive_path(path):
        headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        headers["Pragma"] = "no-cache"
        headers["Expires"] = "0"
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all responses.

    Implements OWASP recommended security headers for API protection.
    Sensitive paths additionally get no-cache headers.
    """

    def __init__(self, app: ASGIApp, settings: Settings):
        super().__init__(app)
        self._settings = settings

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request and add security headers to response.

        Args:
            request: Incoming request
            call_next: Next middleware in chain

        Returns:
            Response with security headers
        """
        response = await call_next(request)
        response.headers.update(security_headers(self._settings, request.url.path))
        return response


def is_sensitive_path(path: str) -> bool:
    """Check if a path should never be cached by clients or proxies."""
    return any(marker in path for marker in SENSITIVE_PATH_MARKERS)


def add_cors(app: FastAPI, settings: Settings) -> None:
    """Install the CORS policy configured in settings."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.get_cors_methods(),
        allow_headers=settings.get_cors_headers(),
        expose_headers=settings.get_cors_exposed_headers(),
        max_age=settings.cors_max_age,
    )


# ==================== USERS ====================


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor

    Returns:
        Hashed password string
    """
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        password: Plain text password to verify
        hashed_password: Stored hash to verify against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.error(f"Password verification failed: {e}")
        return False


@dataclass(frozen=True)
class User:
    username: str
    password_hash: str
    roles: FrozenSet[str]


class UserStore:
    """In-memory users for the operational endpoints."""

    def __init__(self, users: Dict[str, User]):
        self._users = users

    @classmethod
    def from_settings(cls, settings: Settings) -> "UserStore":
        """Build the admin and monitor users, hashing their configured passwords."""
        rounds = settings.password_hash_rounds
        users = [
            User(
                settings.admin_username,
                hash_password(settings.admin_password, rounds),
                frozenset({ROLE_ADMIN}),
            ),
            User(
                settings.monitor_username,
                hash_password(settings.monitor_password, rounds),
                frozenset({ROLE_MONITOR}),
            ),
        ]
        return cls({user.username: user for user in users})

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the user if the credentials match, None otherwise."""
        user = next(
            (
                candidate
                for name, candidate in self._users.items()
                if secrets.compare_digest(name.encode("utf-8"), username.encode("utf-8"))
            ),
            None,
        )
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def require_roles(*roles: str) -> Callable[..., User]:
    """
    Build a dependency admitting authenticated users holding any of ``roles``.

    Missing or wrong credentials give 401 with a Basic challenge; a valid
    user without the role gives 403.
    """
    allowed = frozenset(roles)

    def dependency(
        credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
        users: UserStore = Depends(get_user_store),
    ) -> User:
        user = None
        if credentials is not None:
            user = users.authenticate(credentials.username, credentials.password)

        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Full authentication is required to access this resource",
                headers={"WWW-Authenticate": "Basic"},
            )

        if not user.roles & allowed:
            logger.warning(f"User '{user.username}' denied: requires one of {sorted(allowed)}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access Denied",
            )

        return user

    return dependency
