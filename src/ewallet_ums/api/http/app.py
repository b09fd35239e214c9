"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from ewallet_ums.api.http.app_data import ApplicationDependencies
from ewallet_ums.api.http.middleware import RequestTimeoutMiddleware
from ewallet_ums.api.http.responses import (
    REQUEST_ID_HEADER,
    get_request_id,
    send_error_response,
)
from ewallet_ums.api.http.routers.health import router as health_router
from ewallet_ums.core.services import DatabaseService, HealthCheckService
from ewallet_ums.runtime.config import ConfigData
from ewallet_ums.runtime.context import get_config


def resolve_client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the peer address."""
    xff = request.headers.get("x-forwarded-for")
    return (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )


def create_app(
    config: ConfigData | None = None, database: DatabaseService | None = None
) -> FastAPI:
    """Build the HTTP application around one shared database service.

    ``database`` defaults to a service built from ``config.database``; tests pass
    their own. The connection pool is opened in the lifespan so a failed
    ``init()`` aborts startup before the server accepts traffic.
    """
    config = config or get_config()
    database_service = database or DatabaseService(config.database)
    deps = ApplicationDependencies(
        database_service=database_service,
        health_service=HealthCheckService(database_service),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting up application in {} environment", config.app.environment
        )
        await database_service.init()
        logger.info("Connection pool status: {}", database_service.get_pool_status())
        try:
            yield
        finally:
            logger.info("Shutting down application")
            await database_service.close()
            logger.info("Database connections closed")

    production = config.app.environment == "production"
    app = FastAPI(
        title="ewallet-ums",
        lifespan=lifespan,
        docs_url=None if production else "/docs",
        redoc_url=None if production else "/redoc",
    )
    app.state.app_dependencies = deps

    # Added first so it runs inside the request logging middleware
    app.add_middleware(RequestTimeoutMiddleware, timeout=config.app.request_timeout)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": resolve_client_ip(request),
            "user_agent": request.headers.get("user-agent", "unknown"),
        }

        start = time.perf_counter()
        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start")
                response = await call_next(request)
            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                response = send_error_response(
                    request, "Internal server error", exc, status_code=500
                )
            else:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 1),
                ).info("request.end")

        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        response = send_error_response(
            request, str(exc.detail), None, status_code=exc.status_code
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        logger.bind(request_id=get_request_id(request)).warning(
            "Request validation failed: {}", exc.errors()
        )
        return send_error_response(
            request, "Invalid request", str(exc.errors()), status_code=422
        )

    app.include_router(health_router)
    return app
