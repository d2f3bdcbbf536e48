from fastapi import APIRouter

from tasklink.api.task_routes import router as task_router
from tasklink.api.webhook_routes import router as webhook_router

router = APIRouter()
router.include_router(webhook_router)
router.include_router(task_router)
