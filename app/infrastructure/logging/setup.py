"""Structlog configuration for the geolocate service.

``configure_logging`` runs once from the application lifespan (and from the
test conftest). Modules take their logger from ``get_module_logger`` at import
time; bound loggers resolve the configuration lazily so import order does
not matter.
"""

import inspect
import logging
import sys
from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.logging.formatters import mask_sensitive_data, truncate_large_values

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

SILENT_LEVEL = logging.CRITICAL + 1


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def build_processors(prod_mode: bool) -> List[Any]:
    """Processor chain shared by every logger.

    Request context is merged first so correlation ids reach the renderer.
    Sensitive values (the ipstack access key among them) are masked before
    anything is rendered. Production renders JSON lines for log shipping,
    development a colourised console view.
    """
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        mask_sensitive_data(),
        truncate_large_values(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if prod_mode:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def _configure_silent() -> BoundLogger:
    """Keep bound loggers working under pytest without emitting anything."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=SILENT_LEVEL, force=True)
    logging.root.setLevel(SILENT_LEVEL)
    return structlog.stdlib.get_logger()


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
    settings: Optional["Settings"] = None,
) -> BoundLogger:
    """Configure structlog and the standard library root logger.

    Args:
        log_level: Overrides ``settings.LOG_LEVEL``.
        is_production: Overrides ``settings.is_production`` (JSON output).
        settings: Settings to read defaults from; loaded through the
            settings provider when needed and omitted.

    Returns:
        A logger bound to the new configuration.
    """
    if _is_test_environment():
        return _configure_silent()

    if settings is None and (log_level is None or is_production is None):
        from infrastructure.services.providers import get_settings

        settings = get_settings()

    prod_mode = is_production if is_production is not None else settings.is_production
    level_name = (log_level or settings.LOG_LEVEL).upper()

    structlog.configure(
        processors=build_processors(prod_mode),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level_name, logging.INFO),
    )

    return structlog.stdlib.get_logger()


def get_module_logger() -> BoundLogger:
    """Logger bound to the calling module.

    Example:
        # In packages/geolocate/service.py
        logger = get_module_logger()
        # binds component="service", module_path="packages.geolocate.service"
    """
    logger = structlog.stdlib.get_logger()

    current_frame = inspect.currentframe()
    frame = current_frame.f_back if current_frame is not None else None
    module = inspect.getmodule(frame) if frame is not None else None
    if module is None:
        return logger.bind(component="unknown")

    module_path = module.__name__
    return logger.bind(component=module_path.rsplit(".", 1)[-1], module_path=module_path)
