"""
Shortpaste - Main FastAPI application.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortpaste import __version__
from shortpaste.config import settings
from shortpaste.database import PasteStore, open_client
from shortpaste.exceptions import IdentifierAllocationError, StoreUnavailable
from shortpaste.routes import health, pastes, views
from shortpaste.sweeper import ExpirySweeper, SweepScheduler

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store handle and start the sweep task; release both on shutdown."""
    logger.info("Shortpaste application starting...")

    client = None
    if getattr(app.state, "store", None) is None:
        client = open_client(
            settings.REDIS_URL,
            allow_fallback=settings.ALLOW_MEMORY_FALLBACK,
            use_memory=settings.USE_MEMORY_STORE,
        )
        app.state.store = PasteStore(client)

    store: PasteStore = app.state.store
    if store.using_fallback:
        logger.warning("DATABASE: Using IN-MEMORY storage (Redis not available)")
        logger.warning("   Data will NOT persist across server restarts!")
    else:
        logger.info("DATABASE: Connected to Redis")

    scheduler = None
    if settings.SWEEP_INTERVAL_SECONDS > 0:
        scheduler = SweepScheduler(ExpirySweeper(store), settings.SWEEP_INTERVAL_SECONDS)
        await scheduler.start()

    try:
        yield
    finally:
        logger.info("Shortpaste application shutting down...")
        if scheduler:
            await scheduler.stop()
        if client is not None:
            client.close()
            app.state.store = None


async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Store unavailable: {exc} path={request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage backend unavailable", "code": "STORE_UNAVAILABLE"},
    )


async def identifier_allocation_handler(request: Request, exc: IdentifierAllocationError):
    logger.error(f"Identifier allocation failed: {exc} path={request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Failed to save paste", "code": "IDENTIFIER_EXHAUSTED"},
    )


def create_app(store: Optional[PasteStore] = None) -> FastAPI:
    """
    Build the application.

    Args:
        store: Pre-built paste store; when omitted the lifespan opens one
            from settings and closes it on shutdown.
    """
    app = FastAPI(
        title="Shortpaste",
        description="Share text snippets under short, expiring links",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.store = store

    # Add CORS middleware (optional, for cross-origin requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreUnavailable, store_unavailable_handler)
    app.add_exception_handler(IdentifierAllocationError, identifier_allocation_handler)

    # API routes first, the catch-all paste views last
    app.include_router(health.router)
    app.include_router(pastes.router)
    app.include_router(views.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "shortpaste.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
