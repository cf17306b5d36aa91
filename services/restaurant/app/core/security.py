import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq

from shared import load_service_config

_security = load_service_config("restaurant").security

# lidas tanto em CI quanto em "prod"
SECRET_KEY = _security.secret_key
JWT_ALGORITHM = _security.jwt_algorithm
ACCESS_TOKEN_EXPIRE_HOURS = _security.access_token_expire_hours

PBKDF2_DIGEST = "sha256"
PBKDF2_ROUNDS = int(os.getenv("PASSWORD_HASH_ROUNDS", "120000"))
SALT_BYTES = 16
_SEPARATOR = ":"


def criar_token_jwt(user_id: int, restaurant_id: Optional[int], role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)
    to_encode = {
        "exp": expire,
        "sub": str(user_id),              # id do usuário
        "restaurant_id": restaurant_id,   # None para SUPER_ADMIN
        "role": role,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def _derive(password: str, salt: bytes) -> bytes:
    return pbkdf2_hmac(PBKDF2_DIGEST, password.encode("utf-8"), salt, PBKDF2_ROUNDS)


def get_password_hash(password: str) -> str:
    """Devolve ``"<salt_hex>:<digest_hex>"`` com um salt aleatório novo."""
    salt = secrets.token_bytes(SALT_BYTES)
    return f"{salt.hex()}{_SEPARATOR}{_derive(password, salt).hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Confere a senha contra o digest salvo; digest malformado nunca confere."""
    if not hashed_password:
        return False

    parts = hashed_password.split(_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        return False

    try:
        salt = bytes.fromhex(parts[0])
        expected = bytes.fromhex(parts[1])
    except ValueError:
        return False

    return consteq(_derive(plain_password, salt), expected)
