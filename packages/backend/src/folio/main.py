"""FastAPI application factory.

Learn: App factory pattern: create_app() returns a configured FastAPI
instance. The JWT signing config is validated and built here, once,
and stored on app.state for the auth dependencies to pick up.

Startup posture (ENVIRONMENT / NODE_ENV):
- production  → a missing/short JWT_SECRET raises ConfigError and the
                process never starts serving
- otherwise   → the error is logged and the app runs degraded: routes
                that need the signing config answer 500
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from folio import __version__
from folio.api import build_api_router
from folio.auth.config import load_jwt_config
from folio.auth.errors import AuthError, ConfigError
from folio.config import Settings, get_settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    logger.info(
        "folio.starting",
        version=__version__,
        environment=settings.environment,
        auth_configured=app.state.jwt_config is not None,
    )

    yield

    logger.info("folio.shutdown")
    from folio.db.engine import engine
    await engine.dispose()


def configure_auth(app: FastAPI, settings: Settings) -> None:
    """Validate JWT settings and attach the result to app.state."""
    app.state.jwt_config = None
    app.state.jwt_config_error = None
    try:
        app.state.jwt_config = load_jwt_config(settings)
    except ConfigError as e:
        logger.error(
            "auth.config_invalid",
            error=e.message,
            environment=settings.environment,
            fatal=settings.is_production,
        )
        if settings.is_production:
            raise
        app.state.jwt_config_error = e.message


def register_error_handlers(app: FastAPI) -> None:
    """Translate every failure into ``{"error": message}``."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": "Validation failed",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else exc.detail
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("folio.unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Folio API",
        description="Backend for a personal portfolio site: content API and admin auth",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    configure_auth(app, settings)
    register_error_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    from folio.middleware.request_id import RequestIdMiddleware
    from folio.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SecurityHeadersMiddleware,
        no_store_prefixes=(
            f"{settings.api_prefix}/auth",
            f"{settings.api_prefix}/admin",
        ),
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(build_api_router(settings.api_prefix))

    return app


# Default app instance (used by uvicorn: folio.main:app)
app = create_app()
