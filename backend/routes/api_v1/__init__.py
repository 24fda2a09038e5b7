"""API v1: combat log upload."""

from fastapi import APIRouter

from .logs import router as logs_router

router = APIRouter(prefix="/api/v1", tags=["api_v1"])
router.include_router(logs_router)

api_v1_router = router
