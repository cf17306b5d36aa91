from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.auth_dependencies import get_permission_cache, get_tenant_scope, narrow_scope, require_permission
from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.core.tenancy import TenantScope
from app.models.user import User
from app.schemas.user_schema import UserCreate, UserOut, UserUpdate
from . import crud, validators
from .errors import to_http_exception

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("staff:write")),
    scope: TenantScope = Depends(get_tenant_scope),
    cache=Depends(get_permission_cache),
):
    validators.ensure_unique_email(db, payload.email)

    try:
        return crud.create_user(db, payload, scope, actor_role=current_user.role, cache=cache)
    except ServiceError as exc:
        raise to_http_exception(exc)
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Erro ao criar usuário")


@router.get("/staff", response_model=List[UserOut])
def list_staff(
    restaurant_id: Optional[int] = Query(default=None, description="Filtra por restaurante (SUPER_ADMIN)"),
    limit: int = Query(default=50, gt=0),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _=Depends(require_permission("staff:read")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    return crud.list_staff(db, narrow_scope(scope, restaurant_id), limit=limit, offset=offset)


@router.get("/staff/{user_id}", response_model=UserOut)
def get_staff_member(
    user_id: int,
    db: Session = Depends(get_db),
    _=Depends(require_permission("staff:read")),
    scope: TenantScope = Depends(get_tenant_scope),
):
    user = crud.get_staff_member(db, user_id, scope)
    if not user:
        raise HTTPException(status_code=404, detail=crud.USER_NOT_FOUND)
    return user


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission("staff:write")),
    scope: TenantScope = Depends(get_tenant_scope),
    cache=Depends(get_permission_cache),
):
    if payload.email:
        validators.ensure_unique_email(db, payload.email, user_id=user_id)

    try:
        return crud.update_user(db, user_id, payload, scope, actor_role=current_user.role, cache=cache)
    except ServiceError as exc:
        raise to_http_exception(exc)
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Erro ao atualizar usuário")
