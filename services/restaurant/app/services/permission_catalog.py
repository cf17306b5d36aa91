"""Catálogo fixo de permissões e vínculos padrão papel → permissão.

O seed é idempotente e tolera inicializações concorrentes: cada INSERT roda
em um SAVEPOINT e uma violação de unicidade é tratada como "já existe", com
a linha existente relida em seguida.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.enums import UserRole
from app.models.permission import Permission, RolePermission

logger = logging.getLogger(__name__)

T = TypeVar("T")

# (nome, recurso, ação, descrição)
DEFAULT_PERMISSIONS: Tuple[Tuple[str, str, str, str], ...] = (
    ("customers:read", "customers", "read", "View customer information"),
    ("customers:write", "customers", "write", "Create and update customer information"),
    ("customers:delete", "customers", "delete", "Delete customer records"),
    ("staff:read", "staff", "read", "View staff information"),
    ("staff:write", "staff", "write", "Create and update staff information"),
    ("staff:delete", "staff", "delete", "Delete staff records"),
    ("settings:read", "settings", "read", "View restaurant settings"),
    ("settings:write", "settings", "write", "Modify restaurant settings"),
    ("billing:read", "billing", "read", "View billing information"),
    ("billing:write", "billing", "write", "Manage billing and subscriptions"),
    ("reports:read", "reports", "read", "View reports and analytics"),
)

ALL_PERMISSION_NAMES: Tuple[str, ...] = tuple(name for name, *_ in DEFAULT_PERMISSIONS)

ROLE_PERMISSION_MAP: Dict[UserRole, Tuple[str, ...]] = {
    UserRole.SUPER_ADMIN: ALL_PERMISSION_NAMES,
    UserRole.RESTAURANT_OWNER: ALL_PERMISSION_NAMES,
    UserRole.MANAGER: (
        "customers:read",
        "customers:write",
        "customers:delete",
        "staff:read",
        "staff:write",
        "reports:read",
    ),
    UserRole.STAFF: (
        "customers:read",
        "reports:read",
    ),
}


def _get_or_insert(db: Session, lookup: Callable[[], Optional[T]], build: Callable[[], T]) -> Tuple[T, bool]:
    existing = lookup()
    if existing is not None:
        return existing, False

    savepoint = db.begin_nested()
    try:
        row = build()
        db.add(row)
        savepoint.commit()
        return row, True
    except IntegrityError:
        # outro processo inseriu a mesma linha entre o SELECT e o INSERT
        savepoint.rollback()
        row = lookup()
        if row is None:
            raise
        return row, False


def _seed_permissions(db: Session) -> List[Permission]:
    catalog: List[Permission] = []
    created = 0
    for name, resource, action, description in DEFAULT_PERMISSIONS:
        permission, inserted = _get_or_insert(
            db,
            lambda name=name: db.query(Permission).filter(Permission.name == name).first(),
            lambda name=name, resource=resource, action=action, description=description: Permission(
                name=name,
                resource=resource,
                action=action,
                description=description,
            ),
        )
        created += int(inserted)
        catalog.append(permission)

    if created:
        logger.info("Permissões padrão criadas: %s novas de %s", created, len(catalog))
    return catalog


def seed_default_permissions(db: Session) -> List[Permission]:
    """Insere as permissões que faltam e devolve o catálogo completo."""
    try:
        catalog = _seed_permissions(db)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Falha ao criar permissões padrão")
        raise
    return catalog


def assign_default_role_permissions(db: Session) -> List[RolePermission]:
    """Garante o catálogo e insere os vínculos (papel, permissão) que faltam."""
    try:
        permission_ids = {permission.name: permission.id for permission in _seed_permissions(db)}

        mappings: List[RolePermission] = []
        created = 0
        for role, names in ROLE_PERMISSION_MAP.items():
            for name in names:
                permission_id = permission_ids.get(name)
                if permission_id is None:
                    logger.warning("Permissão %s não encontrada para o papel %s", name, role.value)
                    continue

                edge, inserted = _get_or_insert(
                    db,
                    lambda role=role, permission_id=permission_id: db.query(RolePermission)
                    .filter(RolePermission.role == role, RolePermission.permission_id == permission_id)
                    .first(),
                    lambda role=role, permission_id=permission_id: RolePermission(
                        role=role,
                        permission_id=permission_id,
                    ),
                )
                created += int(inserted)
                mappings.append(edge)

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Falha ao atribuir permissões padrão aos papéis")
        raise

    if created:
        logger.info("Vínculos papel-permissão criados: %s novos de %s", created, len(mappings))
    return mappings
