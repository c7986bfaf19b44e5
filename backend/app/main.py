"""
Radar API - Main FastAPI application.

Location sharing: users report where they are and discover who is nearby,
subject to each other's privacy settings.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.database import init_db
from app.errors import RadarError, StorageError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    # Startup
    logger.info("Starting %s in %s mode...", settings.app_name, settings.app_env)
    await init_db()
    logger.info("Database initialized.")

    yield

    # Shutdown
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.app_name,
    description="Find people nearby",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware - allow frontend apps to connect
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error mapping
# =============================================================================

@app.exception_handler(RadarError)
async def radar_error_handler(request: Request, exc: RadarError):
    if isinstance(exc, StorageError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Service temporarily unavailable, please try again"},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed input is the caller's fault: 400 rather than FastAPI's 422."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(messages) or "Invalid request"},
    )


@app.get("/")
async def root():
    """Root endpoint - basic health check."""
    return {
        "app": settings.app_name,
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}


# Routers
from app.routers import location, nearby, privacy, users

app.include_router(location.router, prefix="/api/users/location", tags=["Location"])
app.include_router(privacy.router, prefix="/api/users/privacy", tags=["Privacy"])
app.include_router(nearby.router, prefix="/api/users/nearby", tags=["Nearby"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
