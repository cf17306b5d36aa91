import os
import sys
from pathlib import Path
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt

SECRET_KEY = os.getenv("SECRET_KEY", "ci-test-secret-with-at-least-32-characters")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS512")

SERVICE_DIR = Path(__file__).resolve().parents[1]
ROOT_DIR = SERVICE_DIR.parent.parent

service_path = str(SERVICE_DIR)
shared_path = str(ROOT_DIR / "services")
for path in (service_path, shared_path):
    if path in sys.path:
        sys.path.remove(path)
    sys.path.insert(0, path)

for module_name in list(sys.modules):
    if module_name == "app" or module_name.startswith("app."):
        sys.modules.pop(module_name)

# Garante que o app e os testes usem o mesmo segredo/algoritmo
os.environ.setdefault("SECRET_KEY", SECRET_KEY)
os.environ.setdefault("JWT_ALGORITHM", ALGORITHM)

os.environ["RESTAURANT_DATABASE_URL"] = f"sqlite:///{SERVICE_DIR / 'test_restaurant.db'}"
os.environ["REDIS_URL"] = ""  # sem cache Redis nos testes
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"  # PBKDF2 rápido nos testes
os.environ.pop("BOOTSTRAP_ADMIN_EMAIL", None)
os.environ.pop("BOOTSTRAP_ADMIN_PASSWORD", None)

from app.main import app  # noqa: E402
from app.core.database import Base, SessionLocal, engine  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402
from app.models import User, UserRole  # noqa: E402
from app.services.permission_catalog import assign_default_role_permissions  # noqa: E402


def _token_for(user_id: int, restaurant_id, role: str) -> str:
    exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "sub": str(user_id),
        "restaurant_id": restaurant_id,
        "role": role,
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, os.environ["SECRET_KEY"], algorithm=os.environ["JWT_ALGORITHM"])


@pytest.fixture(autouse=True)
def prepare_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db):
    assign_default_role_permissions(db)
    return db


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    """Cria um usuário direto no banco, sem passar pela API."""

    def _make_user(
        email: str,
        role: UserRole = UserRole.STAFF,
        restaurant_id=None,
        password: str = "senha-forte-123",
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            first_name="Teste",
            last_name="Usuário",
            role=role,
            restaurant_id=restaurant_id,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_auth_headers():
    """Gera headers Bearer compatíveis com o TokenPayload do serviço."""

    def _make_auth_headers(user: User) -> dict:
        token = _token_for(user.id, user.restaurant_id, user.role.value)
        return {"Authorization": f"Bearer {token}"}

    return _make_auth_headers
