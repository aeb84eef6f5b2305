"""API routers for the plane tracker."""

from fastapi import APIRouter

from .aircraft import router as aircraft_router
from .control import router as control_router
from .health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(aircraft_router)
api_router.include_router(control_router)

__all__ = ["api_router"]
