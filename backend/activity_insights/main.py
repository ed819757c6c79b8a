"""
Activity Insights API - Main Application
FastAPI backend that answers questions about Strava activities with LLM tool calls.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .database import engine, Base
from .logging_config import setup_logging
from .routers import analyze, insights
# Import models to ensure they're registered with SQLAlchemy before create_all
from . import models  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    logger.info("=" * 60)
    logger.info(f"{settings.app_name} v{settings.app_version}")
    if settings.git_commit:
        logger.info(f"Git Commit: {settings.git_commit[:8]}")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; /analyze will fail")
    if not settings.strava_access_token:
        logger.warning("STRAVA_ACCESS_TOKEN not set; /analyze will fail")
    logger.info("=" * 60)

    Base.metadata.create_all(bind=engine)
    yield


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Ask questions about your Strava history and keep the answers",
    lifespan=lifespan,
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc",  # ReDoc
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report invalid requests with the same {error} body the routes use."""
    errors = exc.errors()
    logger.info(f"Rejected request to {request.url.path}: {errors}")
    # Only /analyze takes a body; a malformed one means there is no usable query
    if any(err.get("loc", ("",))[0] == "body" for err in errors):
        return JSONResponse(status_code=400, content={"error": "Query is required"})
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}" for err in errors
    )
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


# Include routers
app.include_router(analyze.router)
app.include_router(insights.router)


@app.get("/")
def root():
    """Root endpoint - API status."""
    response = {
        "message": "Welcome to Activity Insights API",
        "version": settings.app_version,
        "status": "healthy",
        "docs": "/docs"
    }
    if settings.git_commit:
        response["git_commit"] = settings.git_commit[:8]
    return response


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("activity_insights.main:app", host="0.0.0.0", port=8080, reload=settings.debug)
