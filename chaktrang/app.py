from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from chaktrang.infra.config.settings import settings
from chaktrang.core.logger.logger import logger
from chaktrang.api.router import auth, user, health, leaderboard
from chaktrang.api.middleware.logging.request_logging import RequestLoggingMiddleware
from chaktrang.core.exceptions.base import ServiceError
from chaktrang.core.exceptions.handler import GlobalErrorHandler
from chaktrang.core.service.account.store import AccountStore
from chaktrang.core.service.auth.jwt_service import SessionIssuer
from chaktrang.infra.repository.factory import create_account_store


def create_app(
    account_store: Optional[AccountStore] = None,
    session_issuer: Optional[SessionIssuer] = None
) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="""
Ouk Chaktrang game backend - accounts, sessions and player progression.

## Services
- **Authentication**: registration, login, signed session tokens
- **Profiles**: public profile lookup, self-service profile updates
- **Progression**: game results, coins, diamonds, levels 1-50
- **Community**: leaderboard and guild listing

## Authentication
Protected endpoints require a Bearer token from `/api/auth/register` or `/api/auth/login`.
        """,
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    session_issuer = session_issuer or SessionIssuer()
    if session_issuer.uses_default_key:
        if settings.REQUIRE_SECURE_SECRET:
            raise RuntimeError("JWT_SECRET_KEY must be set when REQUIRE_SECURE_SECRET is enabled")
        logger.warning(
            "SECURITY RISK: JWT_SECRET_KEY is not configured, tokens are signed with the built-in default key",
            extra={"service": settings.APP_NAME}
        )

    app.state.session_issuer = session_issuer
    app.state.account_store = account_store or create_account_store(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials="*" not in settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
        max_age=600,  # 10 minutes
    )

    # Request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Add centralized error handlers
    app.add_exception_handler(ServiceError, GlobalErrorHandler.service_error_handler)
    app.add_exception_handler(RequestValidationError, GlobalErrorHandler.validation_error_handler)
    app.add_exception_handler(Exception, GlobalErrorHandler.general_exception_handler)

    # Include routers
    app.include_router(health.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(user.router, prefix="/api")
    app.include_router(leaderboard.router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        logger.info({
            "message": "Starting Ouk Chaktrang API",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "storage_backend": app.state.account_store.backend_name
        })
        try:
            await app.state.account_store.connect()
        except Exception as e:
            # Requests will answer STORAGE_UNAVAILABLE until the backend comes back
            logger.error(
                "Account store unavailable at startup",
                extra={"backend": app.state.account_store.backend_name, "error": str(e)}
            )

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.account_store.close()
        logger.info({
            "message": "Shutting down Ouk Chaktrang API",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION
        })

    return app
