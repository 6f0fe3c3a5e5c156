"""FastAPI entry point for the presentation canvas service."""

import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from services.content_store import get_content_store
from services.conversation_store import get_conversation_store, periodic_cleanup
from services.event_bus import close_event_bus, init_event_bus
from services.middleware import RequestIdMiddleware
from services.turn_service import register_event_handlers
from services.ui_sync import periodic_ui_refresh

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def _stop(task: asyncio.Task) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle — start/stop shared resources."""
    bus = init_event_bus()
    unsubscribe = register_event_handlers(bus)

    content = get_content_store()
    get_conversation_store()
    cleanup_task = asyncio.create_task(
        periodic_cleanup(interval_seconds=settings.conversation_cleanup_interval)
    )
    refresh_task = asyncio.create_task(
        periodic_ui_refresh(content, interval_seconds=settings.ui_refresh_interval)
    )
    logger.info(
        "Presentation service ready: topic=%s slides=%d questions=%d",
        content.topic, content.total_slides, content.total_questions,
    )

    yield

    await _stop(refresh_task)
    await _stop(cleanup_task)
    unsubscribe()
    close_event_bus()


app = FastAPI(
    title="Presentation Canvas Agent",
    description="Routing and dialogue state for a scripted slide presentation in a chat canvas",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Middleware stack (outermost first) ─────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdMiddleware)

# ── Register routers ────────────────────────────────────────
from api.conversation import router as conversation_router  # noqa: E402
from api.health import router as health_router  # noqa: E402
from api.presentation import router as presentation_router  # noqa: E402

app.include_router(health_router)
app.include_router(conversation_router)
app.include_router(presentation_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.service_port,
        reload=settings.debug,
    )
