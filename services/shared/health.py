"""Health check utilities for FastAPI services.

Provides endpoints /health and /ready for Docker/Kubernetes monitoring.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine

try:
    import redis
except ImportError:
    redis = None

CacheProvider = Callable[[], Optional["redis.Redis"]]


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_database_health(engine: Optional[Engine]) -> bool:
    """Verifica se o banco de dados está disponível.

    Args:
        engine: SQLAlchemy engine para conexão com banco

    Returns:
        True se banco está disponível, False caso contrário
    """
    if engine is None:
        return False

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception:
        return False


def check_redis_health(redis_client: Optional["redis.Redis"]) -> Optional[bool]:
    """Verifica se o Redis está disponível.

    Returns:
        True se Redis está disponível,
        False se Redis está configurado mas indisponível,
        None se Redis não está configurado
    """
    if redis_client is None:
        return None

    try:
        return bool(redis_client.ping())
    except Exception:
        return False


def create_health_router(
    service_name: str,
    database_engine: Optional[Engine] = None,
    cache_provider: Optional[CacheProvider] = None,
) -> APIRouter:
    """Cria router FastAPI com endpoints /health e /ready.

    Args:
        service_name: Nome do serviço (ex: "restaurant")
        database_engine: Engine SQLAlchemy para verificação de banco
        cache_provider: Função que devolve o cliente Redis atual (opcional)

    Returns:
        APIRouter configurado com endpoints de health check
    """
    router = APIRouter(tags=["Health"])

    @router.get("/health", status_code=status.HTTP_200_OK)
    def health():
        """Endpoint básico de saúde, sem verificar dependências."""
        return {
            "status": "ok",
            "service": service_name,
            "timestamp": _utc_timestamp(),
        }

    @router.get("/ready", status_code=status.HTTP_200_OK)
    def ready():
        """Endpoint de readiness.

        Verifica o banco (obrigatório) e o Redis (opcional, se configurado).
        Retorna 200 se tudo está OK, 503 se alguma dependência falhou.
        """
        db_healthy = check_database_health(database_engine)
        redis_healthy = check_redis_health(cache_provider() if cache_provider else None)

        # None significa Redis não configurado, o que não derruba o readiness
        all_healthy = db_healthy and redis_healthy is not False

        return JSONResponse(
            content={
                "status": "ready" if all_healthy else "not_ready",
                "service": service_name,
                "timestamp": _utc_timestamp(),
                "checks": {"database": db_healthy, "redis": redis_healthy},
            },
            status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return router
