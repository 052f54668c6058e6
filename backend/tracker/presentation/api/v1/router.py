"""Version 1 of the API: health and parcel endpoints."""

from fastapi import APIRouter

from tracker.presentation.api.v1.endpoints.health import router as health_router
from tracker.presentation.api.v1.endpoints.parcels import router as parcels_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(parcels_router)
