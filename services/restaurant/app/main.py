import os

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from app import models
from app.core.database import Base, SessionLocal, engine
from app.routers import auth, customers, permissions, restaurants, subscriptions, users
from app.services.bootstrap import ensure_super_admin
from app.services.permission_catalog import assign_default_role_permissions
from shared import (
    RequestContextLogMiddleware,
    configure_cors,
    configure_logging,
    create_health_router,
    create_redis_cache,
    database_lifespan_factory,
    invalidate_role_permissions_cache,
    load_service_config,
)

tags_metadata = [
    {
        "name": "Auth",
        "description": "Login com e-mail e senha e emissão de token JWT.",
    },
    {
        "name": "Restaurants",
        "description": "Cadastro e configurações do restaurante (tenant).",
    },
    {
        "name": "Users",
        "description": "Equipe do restaurante: donos, gerentes e atendentes.",
    },
    {
        "name": "Customers",
        "description": "Clientes do restaurante, visitas e pontos de fidelidade.",
    },
    {
        "name": "Subscriptions",
        "description": "Plano contratado pelo restaurante e período de cobrança.",
    },
    {
        "name": "Permissions",
        "description": "Catálogo de permissões e mapeamento papel → permissão.",
    },
]

_CONFIG = load_service_config("restaurant")
_ROOT_PATH = os.getenv("APP_ROOT_PATH", "")
_LOGGER = configure_logging("restaurant")


def _seed_on_startup(app: FastAPI) -> None:
    db = SessionLocal()
    try:
        assign_default_role_permissions(db)
        if _CONFIG.bootstrap.enabled:
            ensure_super_admin(db, _CONFIG.bootstrap.admin_email, _CONFIG.bootstrap.admin_password)
    finally:
        db.close()
    invalidate_role_permissions_cache(app.state.permission_cache)
    _LOGGER.info("permission_catalog_ready")


lifespan = database_lifespan_factory(
    service_name="Restaurant Service",
    metadata=Base.metadata,
    engine=engine,
    models=(
        models.Restaurant,
        models.User,
        models.Customer,
        models.Subscription,
        models.Permission,
        models.RolePermission,
    ),
    on_startup=_seed_on_startup,
)

app = FastAPI(
    title="Restaurant Service",
    version="0.1.0",
    description="API multi-tenant de restaurantes: equipe, clientes, assinaturas e controle de acesso por papel.",
    openapi_tags=tags_metadata,
    root_path=_ROOT_PATH,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.config = _CONFIG
app.state.permission_cache = create_redis_cache(_CONFIG.redis.url)

configure_cors(app)
app.add_middleware(RequestContextLogMiddleware, logger=_LOGGER)


def custom_openapi_schema():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    schema["openapi"] = "3.0.3"
    app.openapi_schema = schema
    return app.openapi_schema


app.openapi = custom_openapi_schema

health_router = create_health_router(
    service_name="restaurant",
    database_engine=engine,
    cache_provider=lambda: app.state.permission_cache,
)
app.include_router(health_router)

app.include_router(auth.router)
app.include_router(restaurants.router)
app.include_router(users.router)
app.include_router(customers.router)
app.include_router(subscriptions.router)
app.include_router(permissions.router)


@app.get("/")
def root():
    return {
        "service": "restaurant",
        "status": "ok",
        "docs_url": "/docs",
        "config": {
            "cache_enabled": app.state.permission_cache is not None,
        },
    }
