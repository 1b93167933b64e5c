"""Main router for API v1."""

from fastapi import APIRouter

from svntag.api.v1 import config, health, tag, validate

router = APIRouter(prefix="/v1")

# Include sub-routers
router.include_router(health.router, tags=["health"])
router.include_router(validate.router, prefix="/validate", tags=["validate"])
router.include_router(config.router, prefix="/config", tags=["config"])
router.include_router(tag.router, prefix="/tag", tags=["tag"])
