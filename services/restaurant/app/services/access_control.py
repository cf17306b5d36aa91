"""Resolução papel → permissões a partir da tabela role_permissions."""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from app.models.enums import UserRole
from app.models.permission import Permission, RolePermission
from app.schemas.permission_schema import PermissionOut
from shared import get_cache_ttl, get_cached_role_permissions, set_cached_role_permissions

logger = logging.getLogger(__name__)


def _normalize_role(role: Union[UserRole, str, None]) -> Optional[UserRole]:
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(str(role).strip().upper())
    except ValueError:
        return None


def permissions_for_role(db: Session, role: Union[UserRole, str, None], cache=None) -> List[PermissionOut]:
    """Permissões concedidas a ``role``; papel desconhecido ou sem vínculo devolve ``[]``.

    Com ``cache`` Redis o resultado é lido de (e gravado no) cache. Nos dois
    caminhos os itens são ``PermissionOut``.
    """
    normalized = _normalize_role(role)
    if normalized is None:
        return []

    cached = get_cached_role_permissions(cache, normalized.value)
    if cached is not None:
        return [PermissionOut.model_validate(item) for item in cached]

    rows = (
        db.query(Permission)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role == normalized)
        .order_by(Permission.id.asc())
        .all()
    )
    permissions = [PermissionOut.model_validate(row) for row in rows]

    if permissions:
        set_cached_role_permissions(
            cache,
            normalized.value,
            [permission.model_dump(mode="json") for permission in permissions],
            ttl=get_cache_ttl("permissions"),
        )
    return permissions


def role_has_permission(db: Session, role: Union[UserRole, str, None], permission_name: str, cache=None) -> bool:
    return any(permission.name == permission_name for permission in permissions_for_role(db, role, cache))


def all_permissions(db: Session) -> List[Permission]:
    return db.query(Permission).order_by(Permission.id.asc()).all()


def all_role_mappings(db: Session) -> List[RolePermission]:
    return db.query(RolePermission).order_by(RolePermission.id.asc()).all()
