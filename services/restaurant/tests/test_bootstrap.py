from app.core.security import verify_password
from app.models import User, UserRole
from app.services.bootstrap import ensure_super_admin


def test_creates_super_admin_once(db):
    admin = ensure_super_admin(db, "admin@plataforma.com", "senha-muito-forte")
    again = ensure_super_admin(db, "admin@plataforma.com", "outra-senha-forte")

    assert admin.id == again.id
    assert admin.role == UserRole.SUPER_ADMIN
    assert admin.restaurant_id is None
    assert verify_password("senha-muito-forte", again.password_hash)
    assert db.query(User).count() == 1


def test_missing_credentials_do_nothing(db):
    assert ensure_super_admin(db, None, "senha-muito-forte") is None
    assert ensure_super_admin(db, "admin@plataforma.com", "") is None
    assert db.query(User).count() == 0


def test_bootstrapped_admin_can_log_in(client, db):
    ensure_super_admin(db, "admin@plataforma.com", "senha-muito-forte")

    response = client.post("/auth/login", data={"email": "admin@plataforma.com", "password": "senha-muito-forte"})

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "SUPER_ADMIN"
    assert response.json()["user"]["restaurant_id"] is None
