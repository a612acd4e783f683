"""Health check endpoint."""

from fastapi import APIRouter, Request

from clientbook.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Returns the current application health status and document storage mode."""
    settings = get_settings()
    schema = getattr(request.app.state, "store_schema", None)
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "native_documents": schema.native_documents if schema is not None else None,
    }
