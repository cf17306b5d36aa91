from app.core.database import SessionLocal
from app.models import Permission, RolePermission, UserRole
from app.services import permission_catalog
from app.services.permission_catalog import (
    ALL_PERMISSION_NAMES,
    DEFAULT_PERMISSIONS,
    assign_default_role_permissions,
    seed_default_permissions,
)


def test_seed_creates_the_eleven_permissions_in_table_order(db):
    catalog = seed_default_permissions(db)

    assert [permission.name for permission in catalog] == list(ALL_PERMISSION_NAMES)
    assert len(catalog) == 11
    billing_write = next(p for p in catalog if p.name == "billing:write")
    assert billing_write.resource == "billing"
    assert billing_write.action == "write"
    assert billing_write.description == "Manage billing and subscriptions"


def test_seeding_twice_keeps_the_same_rows_and_ids(db):
    first = {permission.name: permission.id for permission in seed_default_permissions(db)}
    second = {permission.name: permission.id for permission in seed_default_permissions(db)}

    assert first == second
    assert db.query(Permission).count() == len(DEFAULT_PERMISSIONS)


def test_assign_on_empty_catalog_seeds_permissions_first(db):
    assert db.query(Permission).count() == 0

    mappings = assign_default_role_permissions(db)

    assert db.query(Permission).count() == 11
    assert len(mappings) == 30


def test_assigning_twice_keeps_thirty_edges(db):
    first = assign_default_role_permissions(db)
    second = assign_default_role_permissions(db)

    assert len(first) == len(second) == 30
    assert sorted(edge.id for edge in first) == sorted(edge.id for edge in second)
    assert db.query(RolePermission).count() == 30


def test_edges_per_role_follow_the_role_table(db):
    assign_default_role_permissions(db)

    counts = {
        role: db.query(RolePermission).filter(RolePermission.role == role).count()
        for role in UserRole
    }
    assert counts == {
        UserRole.SUPER_ADMIN: 11,
        UserRole.RESTAURANT_OWNER: 11,
        UserRole.MANAGER: 6,
        UserRole.STAFF: 2,
    }


def test_conflicting_insert_is_treated_as_already_seeded(db):
    # outra "instância" grava a permissão entre o SELECT e o INSERT
    other = SessionLocal()
    try:
        other.add(
            Permission(
                name="customers:read",
                resource="customers",
                action="read",
                description="View customer information",
            )
        )
        other.commit()
        existing_id = other.query(Permission.id).filter(Permission.name == "customers:read").scalar()
    finally:
        other.close()

    lookups = iter([None])

    def stale_then_fresh_lookup():
        # primeira leitura "não vê" a linha, a releitura após o conflito vê
        stale = next(lookups, "fresh")
        if stale is None:
            return None
        return db.query(Permission).filter(Permission.name == "customers:read").first()

    row, inserted = permission_catalog._get_or_insert(
        db,
        stale_then_fresh_lookup,
        lambda: Permission(name="customers:read", resource="customers", action="read"),
    )
    db.commit()

    assert inserted is False
    assert row.id == existing_id
    assert db.query(Permission).count() == 1
