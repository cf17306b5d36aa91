from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session
from app.models.user import User


def ensure_unique_email(db: Session, email: str, user_id: Optional[int] = None) -> None:
    # e-mail é único na plataforma inteira, não por restaurante
    query = db.query(User).filter(User.email == email)
    if user_id:
        query = query.filter(User.id != user_id)

    if query.first():
        raise HTTPException(status_code=400, detail="Já existe um usuário cadastrado com este e-mail.")
