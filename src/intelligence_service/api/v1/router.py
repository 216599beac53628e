"""API v1 router that aggregates all endpoint routers."""

from fastapi import APIRouter

from intelligence_service.api.v1 import health, runs

api_router = APIRouter()

api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    runs.router,
    prefix="/intelligence",
    tags=["Intelligence"],
)
