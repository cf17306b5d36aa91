"""Cria o SUPER_ADMIN da plataforma na inicialização quando há credenciais configuradas."""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import get_password_hash
from app.models.enums import UserRole
from app.models.user import User

logger = logging.getLogger(__name__)


def ensure_super_admin(db: Session, email: Optional[str], password: Optional[str]) -> Optional[User]:
    if not email or not password:
        return None

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        if existing.role != UserRole.SUPER_ADMIN:
            logger.warning("E-mail do admin inicial já pertence a um usuário com papel %s", existing.role.value)
        return existing

    admin = User(
        email=email,
        password_hash=get_password_hash(password),
        first_name="Super",
        last_name="Admin",
        role=UserRole.SUPER_ADMIN,
        restaurant_id=None,
        is_active=True,
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        # outra instância criou o admin primeiro
        db.rollback()
        return db.query(User).filter(User.email == email).first()
    db.refresh(admin)
    logger.info("SUPER_ADMIN inicial criado: %s", email)
    return admin
