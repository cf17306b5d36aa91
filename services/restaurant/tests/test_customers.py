import time

import pytest

from app.core.exceptions import DependencyMissingError, EntityNotFoundError
from app.core.tenancy import TenantScope
from app.routers import crud
from app.schemas.customer_schema import CustomerCreate, CustomerUpdate
from app.schemas.restaurant_schema import RestaurantCreate


@pytest.fixture
def two_restaurants(db):
    first = crud.create_restaurant(db, RestaurantCreate(name="A", email="a@cantina.com"))
    second = crud.create_restaurant(db, RestaurantCreate(name="B", email="b@cantina.com"))
    return first, second


def _customer(db, restaurant_id, first_name="Ana", **extra):
    payload = CustomerCreate(restaurant_id=restaurant_id, first_name=first_name, last_name="Pereira", **extra)
    return crud.create_customer(db, payload, TenantScope.for_restaurant(restaurant_id))


def test_create_customer_with_required_fields_gets_defaults(db, two_restaurants):
    restaurant, _ = two_restaurants

    customer = _customer(db, restaurant.id)

    assert customer.loyalty_points == 0
    assert customer.total_visits == 0
    assert customer.last_visit_date is None
    assert customer.is_active is True
    assert customer.email is None
    assert customer.restaurant_id == restaurant.id


def test_create_customer_for_missing_restaurant(db):
    payload = CustomerCreate(restaurant_id=9999, first_name="Ana", last_name="Pereira")

    with pytest.raises(DependencyMissingError):
        crud.create_customer(db, payload, TenantScope.all_tenants())


def test_create_customer_in_another_tenant_is_not_found(db, two_restaurants):
    first, second = two_restaurants
    payload = CustomerCreate(restaurant_id=second.id, first_name="Ana", last_name="Pereira")

    with pytest.raises(EntityNotFoundError):
        crud.create_customer(db, payload, TenantScope.for_restaurant(first.id))


def test_tenant_isolation_for_reads_and_updates(db, two_restaurants):
    first, second = two_restaurants
    customer = _customer(db, first.id)
    scope_a = TenantScope.for_restaurant(first.id)
    scope_b = TenantScope.for_restaurant(second.id)

    assert crud.get_customer(db, customer.id, scope_b) is None
    assert crud.list_customers(db, scope_b) == []
    with pytest.raises(EntityNotFoundError) as exc_info:
        crud.update_customer(db, customer.id, CustomerUpdate(first_name="Invasor"), scope_b)
    assert exc_info.value.detail == "Cliente não encontrado"

    db.expire_all()
    assert crud.get_customer(db, customer.id, scope_a).first_name == "Ana"
    updated = crud.update_customer(db, customer.id, CustomerUpdate(first_name="Ana Maria"), scope_a)
    assert updated.first_name == "Ana Maria"
    assert [c.id for c in crud.list_customers(db, scope_a)] == [customer.id]
    assert crud.get_customer(db, customer.id, TenantScope.all_tenants()).id == customer.id


def test_missing_and_foreign_customer_share_the_same_error(db, two_restaurants):
    first, second = two_restaurants
    customer = _customer(db, first.id)

    with pytest.raises(EntityNotFoundError) as foreign:
        crud.update_customer(db, customer.id, CustomerUpdate(notes="x"), TenantScope.for_restaurant(second.id))
    with pytest.raises(EntityNotFoundError) as missing:
        crud.update_customer(db, 9999, CustomerUpdate(notes="x"), TenantScope.for_restaurant(second.id))

    assert str(foreign.value) == str(missing.value)


def test_partial_update_of_first_name_leaves_everything_else(db, two_restaurants):
    restaurant, _ = two_restaurants
    customer = _customer(db, restaurant.id, email="ana@cliente.com", phone="11912345678", notes="VIP")
    before = {
        "last_name": customer.last_name,
        "email": customer.email,
        "phone": customer.phone,
        "notes": customer.notes,
        "loyalty_points": customer.loyalty_points,
        "total_visits": customer.total_visits,
        "is_active": customer.is_active,
        "created_at": customer.created_at,
    }
    original_updated_at = customer.updated_at
    time.sleep(0.01)

    updated = crud.update_customer(
        db, customer.id, CustomerUpdate(first_name="Beatriz"), TenantScope.for_restaurant(restaurant.id)
    )

    assert updated.first_name == "Beatriz"
    assert {field: getattr(updated, field) for field in before} == before
    assert updated.updated_at > original_updated_at


def test_explicit_null_clears_optional_fields(db, two_restaurants):
    restaurant, _ = two_restaurants
    customer = _customer(db, restaurant.id, notes="VIP")

    updated = crud.update_customer(
        db, customer.id, CustomerUpdate(notes=None), TenantScope.for_restaurant(restaurant.id)
    )

    assert updated.notes is None


def test_update_rejects_invalid_values():
    with pytest.raises(ValueError):
        CustomerUpdate.model_validate({"loyalty_points": -1})
    with pytest.raises(ValueError):
        CustomerUpdate.model_validate({"first_name": None})


def test_list_customers_newest_first_with_pagination(db, two_restaurants):
    restaurant, _ = two_restaurants
    scope = TenantScope.for_restaurant(restaurant.id)
    created = [_customer(db, restaurant.id, first_name=f"Cliente {i}").id for i in range(3)]

    listed = [c.id for c in crud.list_customers(db, scope)]
    assert listed == list(reversed(created))

    page = [c.id for c in crud.list_customers(db, scope, limit=1, offset=1)]
    assert page == [created[1]]


def test_record_visit_counts_and_adds_points(db, two_restaurants):
    restaurant, other = two_restaurants
    customer = _customer(db, restaurant.id)
    scope = TenantScope.for_restaurant(restaurant.id)

    crud.record_customer_visit(db, customer.id, scope)
    visited = crud.record_customer_visit(db, customer.id, scope, points=15)

    assert visited.total_visits == 2
    assert visited.loyalty_points == 15
    assert visited.last_visit_date is not None

    with pytest.raises(EntityNotFoundError):
        crud.record_customer_visit(db, customer.id, TenantScope.for_restaurant(other.id), points=1)
    with pytest.raises(ValueError):
        crud.record_customer_visit(db, customer.id, scope, points=-5)
