"""
API v1 Router
"""

from fastapi import APIRouter

from app.api.v1 import admin, images, leaderboard, profiles

router = APIRouter()

# Include all endpoint routers
router.include_router(admin.router)
router.include_router(images.router)
router.include_router(leaderboard.router)
router.include_router(profiles.router)

__all__ = ["router"]
