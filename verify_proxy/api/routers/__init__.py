"""API sub-routers assembled into a single api_router."""

from fastapi import APIRouter

from verify_proxy.api.routers.health import router as health_router
from verify_proxy.api.routers.verify import router as verify_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(verify_router, tags=["verify"])
