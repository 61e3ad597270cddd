from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from backoffice.errors import ApiError, not_found
from backoffice.models import User
from backoffice.schemas import UserCreateRequest, UserUpdateRequest
from backoffice.security import (
    create_access_token,
    ensure_login_attempt_allowed,
    hash_password,
    register_login_failure,
    register_login_success,
    verify_password,
)

logger = logging.getLogger("backoffice.users")


def _invalid_credentials() -> ApiError:
    return ApiError(status_code=401, code="INVALID_CREDENTIALS", message="Invalid username or password.")


def authenticate(db: Session, *, username: str, password: str, ip: str) -> tuple[User, str, int]:
    ensure_login_attempt_allowed(ip)

    normalized = username.strip().lower()
    user = db.scalar(
        select(User).where(
            or_(func.lower(User.username) == normalized, func.lower(User.email) == normalized)
        )
    )
    if user is None or not verify_password(password, user.password_hash):
        register_login_failure(ip)
        logger.warning("login_failed", extra={"username": username, "ip": ip})
        raise _invalid_credentials()
    if not user.is_active:
        register_login_failure(ip)
        raise ApiError(status_code=401, code="USER_INACTIVE", message="User account is inactive.")

    register_login_success(ip)
    token, expires_in = create_access_token(user_id=user.id, username=user.username, role=user.role, name=user.name)
    return user, token, expires_in


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise not_found("user")
    return user


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id.asc())).all())


def _ensure_unique(db: Session, *, username: str | None, email: str | None, exclude_id: int | None = None) -> None:
    if username:
        stmt = select(User.id).where(func.lower(User.username) == username.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.scalar(stmt) is not None:
            raise ApiError(status_code=409, code="USERNAME_TAKEN", message="Username already exists.")
    if email:
        stmt = select(User.id).where(func.lower(User.email) == email.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.scalar(stmt) is not None:
            raise ApiError(status_code=409, code="EMAIL_TAKEN", message="Email already exists.")


def create_user(db: Session, payload: UserCreateRequest) -> User:
    _ensure_unique(db, username=payload.username, email=payload.email)
    user = User(
        **payload.model_dump(exclude={"password", "username", "email"}),
        username=payload.username.strip(),
        email=payload.email.strip().lower(),
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, payload: UserUpdateRequest) -> User:
    user = get_user(db, user_id)
    changes = payload.model_dump(exclude_unset=True)
    _ensure_unique(db, username=changes.get("username"), email=changes.get("email"), exclude_id=user.id)

    password = changes.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for field_name, value in changes.items():
        if value is None and field_name in {"username", "email", "name", "role", "site", "is_active"}:
            continue
        if field_name == "email":
            value = value.strip().lower()
        setattr(user, field_name, value)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int, *, current_user_id: int | None) -> None:
    user = get_user(db, user_id)
    if current_user_id is not None and user.id == current_user_id:
        raise ApiError(status_code=400, code="CANNOT_DELETE_SELF", message="You cannot delete your own account.")
    db.delete(user)
    db.commit()
