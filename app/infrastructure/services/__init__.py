"""Settings provider and its FastAPI dependency alias."""

from infrastructure.services.dependencies import SettingsDep
from infrastructure.services.providers import get_settings

__all__ = ["SettingsDep", "get_settings"]
