"""Application lifespan: logging, configuration report and shared services."""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging import configure_logging
from infrastructure.services import get_settings
from packages.geolocate.dependencies import build_geolocation_services

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

APPLICATION_FIELDS = {"PREFIX", "LOG_LEVEL", "GIT_SHA"}


def _report_configuration(settings: "Settings", logger: BoundLogger) -> None:
    """Log which settings were loaded and flag features running degraded.

    Only key names are logged per section; values may hold secrets.
    """
    logger.info(
        "configuration_initialized",
        production=settings.is_production,
        log_level=settings.LOG_LEVEL,
        git_sha=settings.GIT_SHA,
    )
    for section, values in settings.model_dump(exclude=APPLICATION_FIELDS).items():
        logger.info("configuration_loaded", config_setting=section, keys=sorted(values))

    if not settings.ipstack.IPSTACK_ACCESS_KEY:
        logger.warning("ipstack_access_key_missing")
    if not settings.server.ADMIN_JWT_SECRET:
        logger.warning("admin_jwt_secret_missing", cache_administration="disabled")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger = configure_logging(settings=settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _report_configuration(settings, logger)

    try:
        app.state.geolocation = build_geolocation_services(settings)
    except Exception as exc:
        logger.error("geolocation_services_initialization_failed", error=str(exc))
        raise

    try:
        yield
    finally:
        logger.info("application_shutdown")
        app.state.geolocation.close()
        logger.info("geolocation_services_closed")
