"""API router aggregating all route modules."""

from fastapi import APIRouter

from symposium.api.sessions import router as sessions_router
from symposium.api.tools import router as tools_router

router = APIRouter()

# Include all sub-routers
router.include_router(tools_router, tags=["Tools"])
router.include_router(sessions_router, tags=["Sessions"])
