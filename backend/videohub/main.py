"""FastAPI main application."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from videohub import __version__
from videohub.config import settings
from videohub.database import init_db
from videohub.exceptions import VideoHubError, DataIntegrityError
from videohub.services.error_tracking import error_tracker
from videohub.services.logging_service import app_logger as logger, app_metrics

# Import routers
from videohub.routers import videos, comments, tweets, likes, subscriptions, dashboard, health

# Create FastAPI application
app = FastAPI(
    title="VideoHub API",
    description="Video sharing backend: engagement counts, feeds and like / subscription toggles",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    """Count every request outcome for /metrics."""
    response = await call_next(request)

    error_code = getattr(request.state, "error_code", None)
    if error_code is None and response.status_code >= 400:
        error_code = f"http_{response.status_code}"

    app_metrics.increment_request(success=response.status_code < 400, error_code=error_code)
    return response


@app.exception_handler(VideoHubError)
async def videohub_error_handler(request: Request, exc: VideoHubError):
    """Translate domain errors into JSON responses with a stable error code."""
    request.state.error_code = exc.error_code

    if isinstance(exc, DataIntegrityError):
        # Already sent to the error tracker where it was detected
        logger.error("Integrity fault", path=request.url.path, error=exc.message)
    elif exc.status_code >= 500:
        logger.error("Request failed", path=request.url.path, error_code=exc.error_code, error=exc.message)
    else:
        logger.debug("Request rejected", path=request.url.path, error_code=exc.error_code, error=exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error_code": exc.error_code,
        },
    )


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    # Initialize database (create tables if they don't exist)
    init_db()

    logger.info(
        "VideoHub API started",
        environment=settings.ENVIRONMENT,
        version=__version__,
        sentry_enabled=error_tracker.sentry_enabled,
        pagerduty_enabled=error_tracker.pagerduty_enabled
    )


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "VideoHub API",
        "version": __version__,
        "status": "operational",
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs"
    }


# Include routers
app.include_router(health.router, tags=["Health & Monitoring"])
app.include_router(videos.router, prefix="/api/v1/videos", tags=["Videos"])
app.include_router(comments.router, prefix="/api/v1/comments", tags=["Comments"])
app.include_router(tweets.router, prefix="/api/v1/tweets", tags=["Tweets"])
app.include_router(likes.router, prefix="/api/v1/likes", tags=["Likes"])
app.include_router(subscriptions.router, prefix="/api/v1/subscriptions", tags=["Subscriptions"])
app.include_router(dashboard.router, prefix="/api/v1", tags=["Dashboard"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "videohub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
