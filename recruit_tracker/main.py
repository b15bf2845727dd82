from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from recruit_tracker.routers import analytics, candidates, job_requirements, recommendations

from recruit_tracker.utils.logging_config import configure_for_environment, get_logger
from recruit_tracker.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    PerformanceMiddleware,
    HealthCheckMiddleware
)

# Configure logging first
configure_for_environment()
logger = get_logger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    logger.info("Recruit Tracker API starting up...")

    try:
        from recruit_tracker.services.db import init_indexes
        await init_indexes()
    except Exception as e:
        logger.warning(f"Database index initialization had issues: {e}")
        logger.info("Application will continue - some operations may be slower without indexes")

    logger.info("Recruit Tracker API startup completed")

    yield

    logger.info("Recruit Tracker API shutting down...")


app = FastAPI(title="Recruit Tracker API", version=API_VERSION, lifespan=lifespan)

# Middleware runs LIFO: the exception handler sits innermost so
# performance timing still sees the converted error response.
app.add_middleware(ExceptionHandlerMiddleware)
app.add_middleware(PerformanceMiddleware, slow_request_threshold=2.0)
app.add_middleware(HealthCheckMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.get("/")
@app.head("/")
async def root():
    """Root endpoint - handles both GET and HEAD requests for health checks"""
    logger.debug("Root endpoint accessed")
    return {"message": "Welcome to the Recruit Tracker API", "version": API_VERSION, "status": "ok"}


app.include_router(candidates.router, prefix="/api/candidates", tags=["candidates"])
app.include_router(recommendations.router, prefix="/api/recommendations", tags=["recommendations"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
app.include_router(job_requirements.router, prefix="/api/job-requirements", tags=["job-requirements"])

logger.info("Recruit Tracker API initialized successfully")
