from __future__ import annotations

import threading
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from backoffice.errors import ApiError
from backoffice.models import UserRole
from backoffice.settings import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

_LOCK = threading.Lock()
_FAILED_ATTEMPTS: dict[str, deque[datetime]] = defaultdict(deque)
_MAX_ATTEMPTS = 10
_ATTEMPT_WINDOW = timedelta(minutes=10)


@dataclass(frozen=True, slots=True)
class Caller:
    role: UserRole
    user_id: str | None = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN

    @property
    def actor_id(self) -> str:
        return self.user_id or self.role.value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _cleanup_attempts(ip: str, now: datetime) -> None:
    queue = _FAILED_ATTEMPTS[ip]
    threshold = now - _ATTEMPT_WINDOW
    while queue and queue[0] < threshold:
        queue.popleft()
    if not queue:
        _FAILED_ATTEMPTS.pop(ip, None)


def ensure_login_attempt_allowed(ip: str) -> None:
    now = _utcnow()
    with _LOCK:
        _cleanup_attempts(ip, now)
        queue = _FAILED_ATTEMPTS.get(ip, deque())
        if len(queue) >= _MAX_ATTEMPTS:
            raise ApiError(
                status_code=429,
                code="TOO_MANY_ATTEMPTS",
                message="Too many failed login attempts. Please try again later.",
            )


def register_login_failure(ip: str) -> None:
    now = _utcnow()
    with _LOCK:
        _cleanup_attempts(ip, now)
        _FAILED_ATTEMPTS[ip].append(now)


def register_login_success(ip: str) -> None:
    with _LOCK:
        _FAILED_ATTEMPTS.pop(ip, None)


def reset_login_attempts() -> None:
    with _LOCK:
        _FAILED_ATTEMPTS.clear()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError, UnknownHashError):
        # Malformed stored hashes count as a failed login.
        return False


def create_access_token(*, user_id: int, username: str, role: UserRole, name: str | None = None) -> tuple[str, int]:
    settings = get_settings()
    if not settings.jwt_secret:
        raise ApiError(status_code=500, code="AUTH_NOT_CONFIGURED", message="JWT secret is not configured.")

    now = _utcnow()
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "name": name,
        "role": role.value,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.access_token_minutes)).timestamp()),
        "jti": str(uuid4()),
        "typ": "access",
    }
    token = jwt.encode(claims, settings.jwt_secret, algorithm="HS256")
    return token, settings.access_token_minutes * 60


def decode_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require_sub": True, "require_iat": True, "require_exp": True},
        )
    except JWTError as exc:
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Token is invalid.") from exc

    if payload.get("typ") != "access":
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Token type is invalid.")

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Token subject is invalid.")

    try:
        UserRole(str(payload.get("role")))
    except ValueError as exc:
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Token role is invalid.") from exc
    return payload


def require_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict[str, Any]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Missing bearer token.")

    payload = decode_token(credentials.credentials)
    request.state.actor = str(payload.get("role"))
    request.state.actor_id = str(payload.get("username") or payload.get("sub"))
    return payload


def require_superadmin(claims: dict[str, Any] = Depends(require_user)) -> dict[str, Any]:
    if claims.get("role") != UserRole.SUPERADMIN.value:
        raise ApiError(status_code=403, code="FORBIDDEN", message="Insufficient permissions.")
    return claims


def parse_user_type(raw: str | None) -> UserRole:
    value = (raw or "").strip().lower() or get_settings().default_user_type
    try:
        return UserRole(value)
    except ValueError as exc:
        raise ApiError(
            status_code=400,
            code="INVALID_USER_TYPE",
            message=f"Unknown user type: {value}",
        ) from exc


def get_caller(
    request: Request,
    x_user_type: str | None = Header(default=None),
    x_user_id: str | None = Header(default=None),
) -> Caller:
    caller = Caller(
        role=parse_user_type(x_user_type),
        user_id=(x_user_id or "").strip() or None,
    )
    request.state.actor = caller.role.value
    request.state.actor_id = caller.actor_id
    return caller


def require_admin_role(caller: Caller = Depends(get_caller)) -> Caller:
    if caller.role not in {UserRole.SUPERADMIN, UserRole.ADMIN}:
        raise ApiError(
            status_code=403,
            code="FORBIDDEN",
            message="Only superadmin or admin can perform this action.",
        )
    return caller
