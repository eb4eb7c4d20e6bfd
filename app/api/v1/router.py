from fastapi import APIRouter

from packages.geolocate import geolocate_router

# Versioned API, mounted at /api/v1
router = APIRouter()
router.include_router(geolocate_router)
