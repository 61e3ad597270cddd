from typing import Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from backoffice.audit import log_audit, request_meta
from backoffice.db import get_db
from backoffice.models import AuditActorType
from backoffice.schemas import UserCreateRequest, UserRead, UserUpdateRequest
from backoffice.security import require_superadmin
from backoffice.services import users as user_service

router = APIRouter(prefix="/api/users", tags=["users"])


def _claims_user_id(claims: dict[str, Any]) -> int | None:
    try:
        return int(claims.get("sub"))
    except (TypeError, ValueError):
        return None


def _audit_user_change(
    db: Session,
    request: Request,
    claims: dict[str, Any],
    *,
    action: str,
    user_id: int,
    details: dict[str, Any] | None = None,
) -> None:
    log_audit(
        db,
        actor_type=AuditActorType.SUPERADMIN,
        actor_id=str(claims.get("username") or claims.get("sub")),
        action=action,
        entity_type="user",
        entity_id=user_id,
        details=details,
        **request_meta(request),
    )


@router.get("", response_model=list[UserRead])
def list_users_endpoint(
    _claims: dict[str, Any] = Depends(require_superadmin),
    db: Session = Depends(get_db),
) -> list[UserRead]:
    return user_service.list_users(db)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user_endpoint(
    payload: UserCreateRequest,
    request: Request,
    claims: dict[str, Any] = Depends(require_superadmin),
    db: Session = Depends(get_db),
) -> UserRead:
    user = user_service.create_user(db, payload)
    _audit_user_change(
        db,
        request,
        claims,
        action="USER_CREATED",
        user_id=user.id,
        details={"username": user.username, "role": user.role.value},
    )
    return user


@router.patch("/{user_id}", response_model=UserRead)
def update_user_endpoint(
    user_id: int,
    payload: UserUpdateRequest,
    request: Request,
    claims: dict[str, Any] = Depends(require_superadmin),
    db: Session = Depends(get_db),
) -> UserRead:
    user = user_service.update_user(db, user_id, payload)
    changed = sorted(payload.model_dump(exclude_unset=True, exclude={"password"}))
    _audit_user_change(db, request, claims, action="USER_UPDATED", user_id=user.id, details={"fields": changed})
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_endpoint(
    user_id: int,
    request: Request,
    claims: dict[str, Any] = Depends(require_superadmin),
    db: Session = Depends(get_db),
) -> None:
    user_service.delete_user(db, user_id, current_user_id=_claims_user_id(claims))
    _audit_user_change(db, request, claims, action="USER_DELETED", user_id=user_id)
