"""Async lifespan helpers shared by FastAPI services."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable, Iterable, Optional, Sequence

from fastapi import FastAPI
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql.schema import MetaData

logger = logging.getLogger(__name__)

StartupHook = Callable[[FastAPI], None]


def _table_names(models: Sequence[object] | None, metadata: MetaData) -> list[str]:
    if models:
        return [getattr(model, "__tablename__", repr(model)) for model in models]
    return sorted(metadata.tables)


async def _create_tables(service_name: str, metadata: MetaData, engine, retries: int, wait_seconds: float) -> None:
    for attempt in range(1, retries + 1):
        try:
            await asyncio.to_thread(metadata.create_all, bind=engine)
            return
        except OperationalError as exc:
            if attempt == retries:
                logger.error("[%s] Banco indisponível após %s tentativas, desistindo.", service_name, retries)
                raise
            logger.warning(
                "[%s] Banco indisponível, aguardando %ss... tentativa %s: %s",
                service_name,
                wait_seconds,
                attempt,
                exc,
            )
            await asyncio.sleep(wait_seconds)


@asynccontextmanager
async def database_lifespan(
    app: FastAPI,
    *,
    service_name: str,
    metadata: MetaData,
    engine,
    models: Sequence[object] | None = None,
    on_startup: Optional[StartupHook] = None,
    retries: int = 10,
    wait_seconds: float = 2.0,
):
    """Create the tables, run the seeding hook, then serve requests.

    ``on_startup`` runs in a worker thread once the schema exists; its
    failure aborts startup.
    """
    await _create_tables(service_name, metadata, engine, retries, wait_seconds)
    logger.info("[%s] Tabelas prontas: %s", service_name, ", ".join(_table_names(models, metadata)))

    if on_startup is not None:
        await asyncio.to_thread(on_startup, app)

    yield

    logger.info("[%s] Serviço encerrado", service_name)


def database_lifespan_factory(
    *,
    service_name: str,
    metadata: MetaData,
    engine,
    models: Iterable[object] | None = None,
    on_startup: Optional[StartupHook] = None,
    retries: int = 10,
    wait_seconds: float = 2.0,
):
    """Return a FastAPI lifespan callable pre-configured for database initialization."""

    models_tuple = tuple(models) if models else None

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        async with database_lifespan(
            app,
            service_name=service_name,
            metadata=metadata,
            engine=engine,
            models=models_tuple,
            on_startup=on_startup,
            retries=retries,
            wait_seconds=wait_seconds,
        ):
            yield

    return _lifespan
