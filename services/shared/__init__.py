"""Shared utilities used across microservices."""

from .config import ServiceConfig, load_service_config
from .cache import (
    create_redis_cache,
    get_cache_ttl,
    get_cached_role_permissions,
    invalidate_role_permissions_cache,
    set_cached_role_permissions,
)
from .cors import configure_cors
from .health import create_health_router
from .logging import RequestContextLogMiddleware, configure_logging
from .startup import database_lifespan, database_lifespan_factory

__all__ = [
    "ServiceConfig",
    "load_service_config",
    "create_redis_cache",
    "get_cache_ttl",
    "get_cached_role_permissions",
    "set_cached_role_permissions",
    "invalidate_role_permissions_cache",
    "configure_cors",
    "create_health_router",
    "RequestContextLogMiddleware",
    "configure_logging",
    "database_lifespan",
    "database_lifespan_factory",
]
