"""
Application factory for FastAPI.

Handles only FastAPI application creation and configuration.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dpms.api.exception_handlers import register_exception_handlers
from dpms.api.middleware import RequestLoggingMiddleware
from dpms.api.router import api_router
from dpms.config.settings import Settings, get_settings
from dpms.core.lifecycle import lifespan

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "Prescriptions", "description": "Creation, soft delete, role-filtered reads and pharmacist pricing"},
    {"name": "Scannable Payloads", "description": "QR payload issue and reads; artifacts are hidden once fully priced"},
    {"name": "Reminders", "description": "Medication reminder e-mails, scheduled runs and SMTP diagnostics"},
    {"name": "health", "description": "Liveness"},
]


class AppFactory:
    """
    Factory for creating and configuring FastAPI applications.

    Each configuration step is handled by a dedicated method.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_app(self) -> FastAPI:
        app = self._create_base_app()

        self._configure_middleware(app)
        self._configure_exception_handlers(app)
        self._configure_routes(app)

        logger.info(f"Application created: {self._settings.PROJECT_NAME}")
        return app

    def _create_base_app(self) -> FastAPI:
        return FastAPI(
            title=self._settings.PROJECT_NAME,
            description=self._settings.PROJECT_DESCRIPTION,
            version=self._settings.VERSION,
            docs_url=f"{self._settings.API_V1_STR}/docs" if self._settings.DEBUG else None,
            redoc_url=f"{self._settings.API_V1_STR}/redoc" if self._settings.DEBUG else None,
            openapi_tags=OPENAPI_TAGS,
            lifespan=lifespan,
        )

    def _configure_middleware(self, app: FastAPI) -> None:
        """CORS outermost, request logging inside it."""
        app.add_middleware(RequestLoggingMiddleware)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _configure_exception_handlers(self, app: FastAPI) -> None:
        register_exception_handlers(app)

    def _configure_routes(self, app: FastAPI) -> None:
        app.include_router(api_router, prefix=self._settings.API_V1_STR)
        logger.info(f"Routes configured under {self._settings.API_V1_STR}")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create FastAPI application using the factory.

    Args:
        settings: Optional settings override

    Returns:
        Configured FastAPI application
    """
    return AppFactory(settings).create_app()
