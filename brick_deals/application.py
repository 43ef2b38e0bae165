"""FastAPI application factory and bootstrap helpers."""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from brick_deals.api.routes import include_api_routes
from brick_deals.config import settings
from brick_deals.errors import BrickDealsError, ValidationError
from brick_deals.services.catalog.rebrickable_client import get_catalog_source
from brick_deals.services.clients import close_clients
from brick_deals.services.notifications.push_gateway import get_push_gateway
from brick_deals.services.storage.redis_client import get_redis_client

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "X-API-Key", "Authorization"]
CORS_MAX_AGE = 86400


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    if not settings.api_key_configured:
        logger.warning(
            "Running without APP_API_KEY: admin endpoints are unauthenticated "
            "and CORS reflects any origin"
        )

    yield

    await close_clients(get_catalog_source(), get_push_gateway(), get_redis_client())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Brick Deal Hunter",
        description="Catalog ingestion, deal derivation and push notification API",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    _configure_cors(app)
    _register_exception_handlers(app)
    include_api_routes(app)

    return app


def _origin_regex(origins: list[str]) -> str:
    """Exact origins, plus scheme-only entries such as ``exp://`` as prefixes."""

    parts = [
        re.escape(origin) + (".*" if origin.endswith("://") else "")
        for origin in origins
    ]
    return "^(?:" + "|".join(parts) + ")$"


def _configure_cors(app: FastAPI) -> None:
    """Restrict origins once an API key is configured; reflect any otherwise."""

    if settings.api_key_configured:
        origin_regex = _origin_regex(settings.ALLOWED_ORIGINS)
    else:
        origin_regex = ".*"

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=origin_regex,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        max_age=CORS_MAX_AGE,
    )


def _error_body(message: str) -> dict:
    return {"success": False, "error": message}


def _register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to a generic ``{success, error}`` body."""

    @app.exception_handler(BrickDealsError)
    async def _domain_error(request: Request, exc: BrickDealsError) -> JSONResponse:
        message = exc.detail if exc.status_code < 500 else exc.public_message
        return JSONResponse(status_code=exc.status_code, content=_error_body(message))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.debug("Rejected request body: %s", exc.errors())
        return JSONResponse(
            status_code=ValidationError.status_code,
            content=_error_body(ValidationError.public_message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_body(BrickDealsError.public_message),
        )
