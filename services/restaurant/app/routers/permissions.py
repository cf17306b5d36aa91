from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_dependencies import get_current_user, get_permission_cache, require_super_admin
from app.core.database import get_db
from app.schemas.permission_schema import PermissionOut, RolePermissionOut
from app.services import access_control, permission_catalog
from shared import invalidate_role_permissions_cache

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("/", response_model=List[PermissionOut])
def list_permissions(db: Session = Depends(get_db), _=Depends(get_current_user)):
    return access_control.all_permissions(db)


@router.get("/roles/{role}", response_model=List[PermissionOut])
def list_role_permissions(
    role: str,
    db: Session = Depends(get_db),
    cache=Depends(get_permission_cache),
    _=Depends(get_current_user),
):
    # papel desconhecido devolve lista vazia
    return access_control.permissions_for_role(db, role, cache)


@router.get("/role-mappings", response_model=List[RolePermissionOut])
def list_role_mappings(db: Session = Depends(get_db), _=Depends(require_super_admin)):
    return access_control.all_role_mappings(db)


@router.post("/seed", response_model=List[PermissionOut])
def seed_permissions(
    db: Session = Depends(get_db),
    cache=Depends(get_permission_cache),
    _=Depends(require_super_admin),
):
    catalog = permission_catalog.seed_default_permissions(db)
    invalidate_role_permissions_cache(cache)
    return catalog


@router.post("/assign-defaults", response_model=List[RolePermissionOut])
def assign_default_permissions(
    db: Session = Depends(get_db),
    cache=Depends(get_permission_cache),
    _=Depends(require_super_admin),
):
    mappings = permission_catalog.assign_default_role_permissions(db)
    invalidate_role_permissions_cache(cache)
    return mappings
