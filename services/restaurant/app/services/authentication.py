import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.security import verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Devolve o usuário ativo com ``email``/``password`` informados, ou ``None``.

    E-mail desconhecido, senha errada e conta inativa são indistinguíveis para
    quem chama.
    """
    user = db.query(User).filter(User.email == email).first()
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        logger.info("Falha de autenticação para %s", email)
        return None
    return user
