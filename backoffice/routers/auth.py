from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from backoffice.audit import log_audit, request_meta
from backoffice.db import get_db
from backoffice.errors import ApiError
from backoffice.models import AuditActorType
from backoffice.schemas import AuthResponse, LoginRequest, UserRead
from backoffice.security import require_user
from backoffice.services.users import authenticate, get_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)) -> AuthResponse:
    meta = request_meta(request)
    request.state.actor = "system"
    request.state.actor_id = "system"

    try:
        user, token, expires_in = authenticate(
            db,
            username=payload.username,
            password=payload.password,
            ip=meta["ip"] or "unknown",
        )
    except ApiError as exc:
        log_audit(
            db,
            actor_type=AuditActorType.SYSTEM,
            actor_id=payload.username.strip() or "unknown",
            action="LOGIN_FAIL",
            success=False,
            details={"reason": exc.code},
            **meta,
        )
        raise

    request.state.actor = user.role.value
    request.state.actor_id = user.username
    log_audit(
        db,
        actor_type=AuditActorType(user.role.value),
        actor_id=user.username,
        action="LOGIN_SUCCESS",
        entity_type="user",
        entity_id=user.id,
        **meta,
    )
    return AuthResponse(access_token=token, expires_in=expires_in, user=UserRead.model_validate(user))


@router.get("/me", response_model=UserRead)
def me(claims: dict[str, Any] = Depends(require_user), db: Session = Depends(get_db)) -> UserRead:
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ApiError(status_code=401, code="INVALID_TOKEN", message="Token is invalid.") from exc
    user = get_user(db, user_id)
    if not user.is_active:
        raise ApiError(status_code=401, code="USER_INACTIVE", message="User account is inactive.")
    return user
