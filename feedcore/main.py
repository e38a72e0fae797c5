from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from feedcore.core.config import settings
from feedcore.core.exceptions import FeedNetworkError
from feedcore.core.time_format import TimeFormatter
from feedcore.modules.home_feed.api.router import router as home_feed_router
from feedcore.modules.home_feed.services.sync import FeedSyncService
from feedcore.modules.posts.api.router import router as posts_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("feedcore")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    logger.info(f"FEED_ENDPOINT_URL: {settings.FEED_ENDPOINT_URL}")

    # One feed per running app; tests may install their own service first
    if getattr(app.state, "feed_service", None) is None:
        app.state.feed_service = FeedSyncService()
    if getattr(app.state, "time_formatter", None) is None:
        app.state.time_formatter = TimeFormatter.from_settings()

    if settings.REFRESH_ON_STARTUP:
        try:
            await app.state.feed_service.refresh()
        except FeedNetworkError as e:
            logger.warning(f"Initial feed refresh failed, starting with an empty feed: {e}")

    yield

    logger.info("Shutting down, cancelling pending submissions")
    await app.state.feed_service.aclose()

# Logs each request; feed routes also report the sync state after the response
class FeedLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        elapsed = time.time() - start_time

        service = getattr(request.app.state, "feed_service", None)
        if service is not None and request.url.path.startswith(f"{settings.API_V1_STR}/feed"):
            logger.info(
                f"Response: {response.status_code} in {elapsed:.4f}s "
                f"(feed={len(service.store)} posts, state={service.state.value}, submitting={service.is_submitting})"
            )
        else:
            logger.info(f"Response: {response.status_code} in {elapsed:.4f}s")
        return response

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        debug=settings.DEBUG,
        description="Session feed: refresh from the server, author posts, render timestamps",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(FeedLogMiddleware)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    app.include_router(home_feed_router, prefix=f"{settings.API_V1_STR}/feed", tags=["home feed"])
    app.include_router(posts_router, prefix=f"{settings.API_V1_STR}/posts", tags=["posts"])

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.PROJECT_NAME}",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs" if settings.DEBUG else None,
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("feedcore.main:app", host="0.0.0.0", port=8000, reload=True)
