from app.models import UserRole
from app.routers import crud
from app.schemas.restaurant_schema import RestaurantCreate
from app.services.authentication import authenticate_user


def _restaurant(db):
    return crud.create_restaurant(db, RestaurantCreate(name="Cantina", email="contato@cantina.com"))


def test_valid_credentials_return_the_user(db, make_user):
    restaurant = _restaurant(db)
    user = make_user("ana@cantina.com", UserRole.MANAGER, restaurant.id, password="senha-certa-1")

    authenticated = authenticate_user(db, "ana@cantina.com", "senha-certa-1")

    assert authenticated is not None
    assert authenticated.id == user.id


def test_every_failure_returns_none(db, make_user):
    restaurant = _restaurant(db)
    make_user("ana@cantina.com", UserRole.MANAGER, restaurant.id, password="senha-certa-1")
    make_user("inativo@cantina.com", UserRole.STAFF, restaurant.id, password="senha-certa-1", is_active=False)

    assert authenticate_user(db, "ninguem@cantina.com", "senha-certa-1") is None
    assert authenticate_user(db, "ana@cantina.com", "senha-errada") is None
    assert authenticate_user(db, "ana@cantina.com", "") is None
    assert authenticate_user(db, "inativo@cantina.com", "senha-certa-1") is None


def test_email_lookup_is_case_sensitive(db, make_user):
    restaurant = _restaurant(db)
    make_user("ana@cantina.com", UserRole.MANAGER, restaurant.id, password="senha-certa-1")

    assert authenticate_user(db, "ANA@cantina.com", "senha-certa-1") is None


def test_corrupted_stored_digest_is_a_plain_failure(db, make_user):
    restaurant = _restaurant(db)
    user = make_user("ana@cantina.com", UserRole.MANAGER, restaurant.id, password="senha-certa-1")
    user.password_hash = "nao-e-um-digest"
    db.commit()

    assert authenticate_user(db, "ana@cantina.com", "senha-certa-1") is None
