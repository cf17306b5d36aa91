import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.exceptions import TenantScopeError
from app.core.security import SECRET_KEY, JWT_ALGORITHM
from app.core.tenancy import TenantScope
from app.models.enums import UserRole
from app.models.user import User
from app.services import access_control

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


class TokenPayload(BaseModel):
    sub: int
    restaurant_id: Optional[int] = None
    role: UserRole


def get_permission_cache(request: Request):
    return getattr(request.app.state, "permission_cache", None)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Valida o JWT e retorna o objeto User do banco.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciais inválidas",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == token_data.sub).first()

    # garante que o restaurante do token ainda é o do usuário
    if not user or not user.is_active or user.restaurant_id != token_data.restaurant_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário não encontrado ou restaurante inválido",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_tenant_scope(current_user: User = Depends(get_current_user)) -> TenantScope:
    try:
        return TenantScope.for_user(current_user)
    except TenantScopeError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.detail)


def narrow_scope(scope: TenantScope, restaurant_id: Optional[int]) -> TenantScope:
    try:
        return scope.narrow(restaurant_id)
    except TenantScopeError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.detail)


def require_permission(permission_name: str):
    """Dependência que exige ``permission_name`` no papel do usuário logado."""

    def _dependency(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
        cache=Depends(get_permission_cache),
    ) -> User:
        if not access_control.role_has_permission(db, current_user.role, permission_name, cache):
            logger.warning(
                "Permissão negada: user_id=%s role=%s permission=%s",
                current_user.id,
                current_user.role.value,
                permission_name,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permissão necessária: {permission_name}",
            )
        return current_user

    return _dependency


def require_super_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.SUPER_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Apenas SUPER_ADMIN pode executar esta operação.",
        )
    return current_user
