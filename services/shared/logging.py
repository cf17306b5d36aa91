"""Structured logging helpers shared across services."""

from __future__ import annotations

import logging
import os
import sys
import time
from typing import Optional
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import structlog


_RESTAURANT_HEADER = "X-Restaurant-ID"
_REQUEST_ID_HEADER = "X-Request-ID"
_TRACE_ID_HEADER = "X-Trace-ID"


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    resolved = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(service_name: str, level: Optional[int] = None) -> structlog.stdlib.BoundLogger:
    """Route structlog through stdlib logging as one JSON object per line.

    ``level`` defaults to ``LOG_LEVEL`` (INFO when unset). The returned
    logger carries ``service`` in every event.
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=_resolve_level(level))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger("restaurant.requests").bind(service=service_name)


def _restaurant_from(request: Request) -> Optional[str]:
    # o header tem prioridade sobre o filtro ?restaurant_id=
    return request.headers.get(_RESTAURANT_HEADER) or request.query_params.get("restaurant_id")


class RequestContextLogMiddleware(BaseHTTPMiddleware):
    """Bind request/restaurant context to structlog and log one event per request."""

    def __init__(self, app, *, logger: Optional[structlog.stdlib.BoundLogger] = None) -> None:
        super().__init__(app)
        self._logger = logger or structlog.get_logger()

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(_REQUEST_ID_HEADER) or str(uuid4())
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            trace_id=request.headers.get(_TRACE_ID_HEADER) or request_id,
            restaurant_id=_restaurant_from(request),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            self._logger.exception("request_failed", duration_ms=_elapsed_ms(started))
            raise
        else:
            self._logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
            response.headers[_REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
