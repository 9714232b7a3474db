"""Main router for API v1."""

from fastapi import APIRouter

from deploy_guide.api.v1 import guidance, health, platforms, validation, workflows

router = APIRouter(prefix="/v1")

# Include sub-routers
router.include_router(health.router, tags=["health"])
router.include_router(platforms.router, prefix="/platforms", tags=["platforms"])
router.include_router(validation.router, prefix="/validation", tags=["validation"])
router.include_router(guidance.router, prefix="/guidance", tags=["guidance"])
router.include_router(workflows.router, prefix="/workflows", tags=["workflows"])
