"""
TaskFlow API Main Application

Entry point for the FastAPI application.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskflow.platform.config import settings
from taskflow.platform.logging import configure_logging, get_logger
from taskflow.api.routers import planning, schedule, tasks

# Configure logging on import
configure_logging()
logger = get_logger(__name__)


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Task prioritization and scheduling engine",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(",") if settings.CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HEALTH ENDPOINTS
# =============================================================================


@app.get("/health/live", tags=["Health"])
async def liveness() -> dict:
    """Liveness probe - is the service running?"""
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"])
async def readiness() -> dict:
    """
    Readiness probe.

    The engine is stateless and has no backing services, so it is ready
    as soon as it runs.
    """
    return {
        "status": "ready",
        "version": settings.VERSION,
        "checks": {},
    }


# =============================================================================
# API ROUTERS
# =============================================================================

app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["Tasks"])
app.include_router(schedule.router, prefix="/api/v1/schedule", tags=["Schedule"])
app.include_router(planning.router, prefix="/api/v1", tags=["Planning"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "taskflow.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
