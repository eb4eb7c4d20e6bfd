"""Annotated aliases for injecting infrastructure services into routes."""

from typing import Annotated

from fastapi import Depends

from infrastructure.configuration import Settings
from infrastructure.services.providers import get_settings

SettingsDep = Annotated[Settings, Depends(get_settings)]

__all__ = ["SettingsDep"]
