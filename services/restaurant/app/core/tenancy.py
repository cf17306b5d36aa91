"""Escopo de tenant para toda leitura e escrita de dados de um restaurante.

O ``TenantScope`` é derivado do próprio ``User`` do chamador. Toda consulta
sobre tabelas do tenant passa por :meth:`TenantScope.apply`, que é o único
lugar onde o filtro por ``restaurant_id`` é montado. SUPER_ADMIN recebe o
escopo de todos os tenants, sem filtro.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Query

from app.core.exceptions import EntityNotFoundError, TenantScopeError
from app.models.enums import UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantScope:
    restaurant_id: Optional[int]
    unrestricted: bool = False

    @classmethod
    def for_restaurant(cls, restaurant_id: int) -> "TenantScope":
        return cls(restaurant_id=int(restaurant_id))

    @classmethod
    def all_tenants(cls) -> "TenantScope":
        return cls(restaurant_id=None, unrestricted=True)

    @classmethod
    def for_user(cls, user) -> "TenantScope":
        if UserRole(user.role) == UserRole.SUPER_ADMIN:
            return cls.all_tenants()
        if user.restaurant_id is None:
            raise TenantScopeError("Usuário sem restaurante associado")
        return cls.for_restaurant(user.restaurant_id)

    @property
    def is_all_tenants(self) -> bool:
        return self.unrestricted and self.restaurant_id is None

    def narrow(self, restaurant_id: Optional[int]) -> "TenantScope":
        """Restringe o escopo global a um restaurante.

        Escopos de um tenant voltam inalterados quando ``restaurant_id`` é o
        mesmo ou não foi informado; outro id levanta ``TenantScopeError``.
        """
        if restaurant_id is None:
            return self
        if self.unrestricted:
            return TenantScope(restaurant_id=int(restaurant_id), unrestricted=True)
        if int(restaurant_id) != self.restaurant_id:
            raise TenantScopeError("Não é permitido acessar dados de outro restaurante")
        return self

    def apply(self, query: Query, column) -> Query:
        if self.is_all_tenants:
            return query
        return query.filter(column == self.restaurant_id)

    def permits(self, restaurant_id: Optional[int]) -> bool:
        if self.is_all_tenants:
            return True
        return restaurant_id is not None and int(restaurant_id) == self.restaurant_id

    def ensure_permits(self, restaurant_id: Optional[int], not_found_detail: str) -> None:
        if not self.permits(restaurant_id):
            logger.warning(
                "Acesso fora do escopo: scope_restaurant_id=%s target_restaurant_id=%s",
                self.restaurant_id,
                restaurant_id,
            )
            raise EntityNotFoundError(not_found_detail)
