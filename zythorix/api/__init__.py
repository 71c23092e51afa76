# zythorix/api/__init__.py
"""
API module for the Zythorix360 API.
Contains FastAPI route definitions for all endpoints.
"""

from fastapi import APIRouter

from .influencer_admin import router as influencer_admin_router
from .influencers import router as influencers_router
from .payments import router as payments_router
from .materials import router as materials_router, admin_router as admin_materials_router
from .mock_tests import router as mock_tests_router
from .users import router as users_router
from .healthcheck import router as healthcheck_router

# Create a main API router, mounted under /api
api_router = APIRouter()

# Admin routes are registered before the influencer routes sharing their prefix
api_router.include_router(influencer_admin_router, prefix="/influencer/admin", tags=["Influencer Admin"])
api_router.include_router(influencers_router, prefix="/influencer", tags=["Influencers"])
api_router.include_router(payments_router, prefix="/payment", tags=["Payments"])
api_router.include_router(materials_router, prefix="/materials", tags=["Materials"])
api_router.include_router(admin_materials_router, prefix="/admin/materials", tags=["Admin"])
api_router.include_router(mock_tests_router, prefix="/admin/tests", tags=["Mock Tests"])
api_router.include_router(users_router, prefix="/user", tags=["Users"])

# Export all routers for use in app.py
__all__ = [
    "api_router",
    "healthcheck_router",
]
