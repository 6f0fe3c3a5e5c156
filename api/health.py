"""Health check and model listing endpoints."""

from fastapi import APIRouter

from config.settings import get_settings
from services.content_store import get_content_store

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health():
    """Liveness probe with the loaded presentation summary."""
    store = get_content_store()
    return {
        "status": "healthy",
        "topic": store.topic,
        "totalSlides": store.total_slides,
        "totalQuestions": store.total_questions,
    }


@router.get("/models")
async def list_models():
    """Models configured for each role."""
    settings = get_settings()
    return {
        "default": settings.default_model,
        "content": settings.content_model,
        "router": settings.router_model,
        "chat": settings.chat_model,
    }
