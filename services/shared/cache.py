"""Cache Redis utilities para o catálogo de permissões por papel.

Fornece funções para cachear dados com TTL configurável e invalidação.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional

try:
    import redis
    REDIS_AVAILABLE = True
except ImportError:
    REDIS_AVAILABLE = False
    redis = None


# Prefixo para chaves de cache
ROLE_PERMISSIONS_CACHE_PREFIX = "permissions:role:"


def create_redis_cache(redis_url: Optional[str]) -> Optional[redis.Redis]:
    """Cria cliente Redis para cache.

    Args:
        redis_url: URL de conexão Redis (ou None se não configurado)

    Returns:
        Cliente Redis ou None se não disponível
    """
    if not REDIS_AVAILABLE or not redis_url or not redis_url.strip():
        return None

    try:
        return redis.Redis.from_url(redis_url, decode_responses=True)
    except Exception:
        return None


def _get_role_permissions_cache_key(role: str) -> str:
    """Gera chave de cache para as permissões de um papel."""
    return f"{ROLE_PERMISSIONS_CACHE_PREFIX}{role}"


def get_cached_role_permissions(
    cache: Optional[redis.Redis],
    role: str,
) -> Optional[List[Dict[str, Any]]]:
    """Recupera as permissões de um papel do cache.

    Args:
        cache: Cliente Redis (ou None se não disponível)
        role: Papel (ex: MANAGER)

    Returns:
        Lista de permissões serializadas ou None se não encontrado
    """
    if cache is None:
        return None

    try:
        cached_data = cache.get(_get_role_permissions_cache_key(role))
        if cached_data is None:
            return None
        return json.loads(cached_data)
    except Exception:
        return None


def set_cached_role_permissions(
    cache: Optional[redis.Redis],
    role: str,
    permissions: List[Dict[str, Any]],
    ttl: int = 300,
) -> bool:
    """Armazena as permissões de um papel no cache.

    Args:
        cache: Cliente Redis (ou None se não disponível)
        role: Papel (ex: MANAGER)
        permissions: Lista de permissões serializadas
        ttl: Time to live em segundos (padrão: 300 = 5 minutos)

    Returns:
        True se armazenado com sucesso, False caso contrário
    """
    if cache is None:
        return False

    try:
        data = json.dumps(permissions, default=str)
        cache.set(_get_role_permissions_cache_key(role), data, ex=ttl)
        return True
    except Exception:
        return False


def invalidate_role_permissions_cache(
    cache: Optional[redis.Redis],
    role: Optional[str] = None,
) -> bool:
    """Invalida cache de permissões.

    Args:
        cache: Cliente Redis (ou None se não disponível)
        role: Papel específico ou None para invalidar todos

    Returns:
        True se invalidado com sucesso, False caso contrário
    """
    if cache is None:
        return False

    try:
        if role:
            cache.delete(_get_role_permissions_cache_key(role))
        else:
            keys = cache.keys(f"{ROLE_PERMISSIONS_CACHE_PREFIX}*")
            if keys:
                cache.delete(*keys)
        return True
    except Exception:
        return False


def get_cache_ttl(ttl_type: str, default: int = 300) -> int:
    """Obtém TTL de cache de variável de ambiente.

    Args:
        ttl_type: Tipo de TTL (ex: 'permissions')
        default: Valor padrão em segundos

    Returns:
        TTL em segundos
    """
    env_var = f"CACHE_TTL_{ttl_type.upper()}"
    ttl_str = os.getenv(env_var)

    if ttl_str:
        try:
            return int(ttl_str)
        except ValueError:
            pass

    return default
