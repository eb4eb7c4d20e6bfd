"""Infrastructure modules for the geolocate service.

Centralized infrastructure components:
- configuration: Settings management (Settings and its sections)
- logging: Structured logging (get_module_logger, bind_request_context)
- operations: Operation results and error classification
- cache: Request, shared and persistent cache layers
- clients: Outbound API clients (ipstack)
- auth: Admin JWT validation
- services: Dependency injection services (SettingsDep, get_settings)
"""

# Observability
from infrastructure.logging import get_module_logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

# Dependency Injection Services
from infrastructure.services import SettingsDep, get_settings

__all__ = [
    # Observability
    "get_module_logger",
    # Operations
    "OperationResult",
    "OperationStatus",
    # Dependency Injection Services
    "SettingsDep",
    "get_settings",
]
