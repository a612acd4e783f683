"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from clientbook.presentation.api.v1.endpoints.health import router as health_router
from clientbook.presentation.api.v1.endpoints.clients import router as clients_router
from clientbook.presentation.api.v1.endpoints.tags import router as tags_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(clients_router)
router.include_router(tags_router)
