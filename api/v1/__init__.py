"""
API v1 module initialization
"""

from fastapi import APIRouter
from .platforms import router as platforms_router
from .posts import router as posts_router
from .billing import router as billing_router

# Create v1 API router
v1_router = APIRouter(prefix="/v1")

# Include all sub-routers
v1_router.include_router(platforms_router, prefix="/platforms", tags=["Platforms"])
v1_router.include_router(posts_router, prefix="/posts", tags=["Posts"])
v1_router.include_router(billing_router, prefix="/billing", tags=["Billing"])
