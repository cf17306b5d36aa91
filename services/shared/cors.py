"""CORS (Cross-Origin Resource Sharing) configuration utilities.

Provides environment-based CORS configuration:
- Development: allows all origins (*)
- Production: restricts to the restaurant dashboard domains from CORS_ORIGINS
"""

from __future__ import annotations

import os
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

_ALLOWED_METHODS = ["GET", "POST", "PUT", "OPTIONS"]
_EXPOSED_HEADERS = ["X-Request-ID"]


def _split_origins(raw: str) -> List[str]:
    # Separar por vírgula e remover espaços em branco
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_cors_origins() -> List[str]:
    """Obtém lista de origens permitidas para CORS baseado no ambiente.

    - Development: retorna ["*"] (permite todos)
    - Production: retorna lista de domínios de CORS_ORIGINS (obrigatório)

    Raises:
        ValueError: Se em produção e CORS_ORIGINS não estiver configurado
    """
    environment = os.getenv("ENVIRONMENT", os.getenv("ENV", "development")).lower()

    if environment not in ("production", "prod"):
        return ["*"]

    origins = _split_origins(os.getenv("CORS_ORIGINS", ""))
    if not origins:
        raise ValueError(
            "CORS_ORIGINS must be set in production. "
            "Configure allowed domains separated by commas, e.g.: "
            "CORS_ORIGINS=https://app.example.com,https://admin.example.com"
        )
    return origins


def configure_cors(app: FastAPI) -> None:
    """Configura middleware CORS no app FastAPI baseado no ambiente.

    Raises:
        ValueError: Se em produção e CORS_ORIGINS não estiver configurado
    """
    origins = get_cors_origins()

    allow_credentials = os.getenv("CORS_ALLOW_CREDENTIALS", "false").lower() == "true"
    max_age = int(os.getenv("CORS_MAX_AGE", "600"))

    # Com "*" o navegador recusa credentials, então desligamos
    if origins == ["*"]:
        allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=_ALLOWED_METHODS,
        allow_headers=["*"],
        expose_headers=_EXPOSED_HEADERS,
        max_age=max_age,
    )
