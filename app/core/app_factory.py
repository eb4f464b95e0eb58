"""
FastAPI application assembly.

Wires settings, the dependency container, middleware, exception handlers and
routers into one app. Tests build their own instance with overridden settings.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.exception_handlers import register_exception_handlers
from app.api.middleware import AuthenticationMiddleware, RequestLoggingMiddleware
from app.api.router import api_router
from app.config.settings import Settings, get_settings
from app.core.container import get_container
from app.core.lifecycle import lifespan
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)


class AppFactory:
    """Builds the scheduling API from a Settings object."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_app(self) -> FastAPI:
        docs_prefix = self._settings.API_V1_STR if self._settings.DEBUG else None
        app = FastAPI(
            title=self._settings.PROJECT_NAME,
            description=self._settings.PROJECT_DESCRIPTION,
            version=self._settings.VERSION,
            docs_url=f"{docs_prefix}/docs" if docs_prefix else None,
            redoc_url=f"{docs_prefix}/redoc" if docs_prefix else None,
            lifespan=lifespan,
        )
        app.state.settings = self._settings
        app.state.container = get_container(self._settings)

        self._add_middleware(app)
        register_exception_handlers(app)
        app.include_router(api_router, prefix=self._settings.API_V1_STR)
        self._add_health_route(app)

        logger.info(f"{self._settings.PROJECT_NAME} {self._settings.VERSION} assembled ({self._settings.ENVIRONMENT})")
        return app

    def _add_middleware(self, app: FastAPI) -> None:
        """
        Starlette runs middleware in reverse order of registration:
        CORS wraps request logging, which wraps authentication.
        """
        app.add_middleware(
            AuthenticationMiddleware,
            token_service=TokenService(self._settings),
            api_prefix=self._settings.API_V1_STR,
        )
        app.add_middleware(RequestLoggingMiddleware)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self._settings.DEBUG else self._settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _add_health_route(self, app: FastAPI) -> None:
        settings = self._settings

        @app.get("/health", tags=["health"])
        async def health_check() -> dict[str, str]:
            """Liveness check; served without authentication."""
            return {
                "status": "ok",
                "environment": settings.ENVIRONMENT,
                "version": settings.VERSION,
            }


def create_app(settings: Settings | None = None) -> FastAPI:
    return AppFactory(settings).create_app()
