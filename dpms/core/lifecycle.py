"""
Application lifecycle management using the FastAPI lifespan pattern.

Startup configures logging, reports the e-mail setup and starts the reminder
scheduler. Shutdown stops the scheduler, waits for in-flight reminder runs,
closes the SMTP session and disposes the database engine.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dpms.config.settings import Settings, get_settings
from dpms.core.container import DependencyContainer, get_container
from dpms.core.shared.logger import configure_logging
from dpms.database.async_db import dispose_engine

logger = logging.getLogger(__name__)


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self, container: DependencyContainer | None = None, settings: Settings | None = None) -> None:
        self._container = container
        self._settings = settings or get_settings()
        self._initialized = False

    @property
    def container(self) -> DependencyContainer:
        if self._container is None:
            self._container = get_container()
        return self._container

    async def startup(self) -> None:
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        configure_logging(
            level=self._settings.LOG_LEVEL,
            format_type=self._settings.LOG_FORMAT,
            log_file=self._settings.LOG_FILE,
        )
        logger.info("Starting application lifecycle...")

        self._verify_configurations()
        await self.container.get_reminder_scheduler().start()

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")
        await self.container.shutdown()
        await dispose_engine()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        """Warn about settings that silently disable features."""
        if not self._settings.smtp_configured:
            logger.warning("SMTP_USERNAME/SMTP_PASSWORD not configured - reminder e-mails will fail as not_configured")
        else:
            logger.info(f"SMTP relay: {self._settings.SMTP_HOST}:{self._settings.SMTP_PORT}")

        if not self._settings.REMINDER_SCHEDULER_ENABLED:
            logger.info("Reminder scheduler is disabled via REMINDER_SCHEDULER_ENABLED=False")
        elif not self._settings.REMINDER_TIMEZONE:
            logger.warning("REMINDER_TIMEZONE not set - reminders fire at 08:00/14:00/20:00 host local time")


_lifecycle_manager: LifecycleManager | None = None


def get_lifecycle_manager() -> LifecycleManager:
    """Get or create the global lifecycle manager instance."""
    global _lifecycle_manager
    if _lifecycle_manager is None:
        _lifecycle_manager = LifecycleManager()
    return _lifecycle_manager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Usage:
        app = FastAPI(lifespan=lifespan)
    """
    lifecycle = get_lifecycle_manager()
    await lifecycle.startup()
    yield
    await lifecycle.shutdown()
