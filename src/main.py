"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_message_feed
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.database.session import dispose_engine
from infrastructure.realtime.message_feed import PostgresMessageFeed

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the live message feed and release connections on shutdown."""
    feed = get_message_feed()
    if isinstance(feed, PostgresMessageFeed):
        try:
            await feed.start()
        except Exception:
            # Chat history and sending keep working; open rooms just stop updating
            logger.exception("message_feed_start_failed")

    yield

    if isinstance(feed, PostgresMessageFeed):
        await feed.stop()
    else:
        await feed.close()
    await dispose_engine()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## AI Service Sharing Platform\n\n"
            "Browse, review and bookmark AI services, and talk about them in "
            "topic chat rooms.\n\n"
            "### Features\n"
            "- **Catalog**: AI service listings with features, pricing and ratings\n"
            "- **Reviews & favorites**: one review per user and service\n"
            "- **Chat rooms**: history plus a live websocket view per room\n\n"
            "### Authentication\n"
            "Write endpoints require a Supabase access token "
            "in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n"
            "The websocket at `/api/v1/rooms/ws` takes it as `?token=`.\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST/PUT/PATCH/DELETE: 10 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "services",
                "description": "AI service catalog, reviews and favorites",
            },
            {
                "name": "profiles",
                "description": "The signed-in user's profile",
            },
            {
                "name": "rooms",
                "description": "Chat rooms, messages and the live room feed",
            },
        ],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.is_production)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
