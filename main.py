"""
MultiMediaBlast Backend API
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text

from api.v1 import v1_router
from schemas.responses import HealthResponse
from utils.config import get_config
from utils.config_bootstrap import validate_config_on_startup
from utils.database import get_session
from utils.error_handler import GlobalExceptionHandler
from utils.middleware import RequestContextMiddleware
from utils.monitoring import init_sentry, registry
from utils.response_envelope import format_success_response
from utils.structured_logging import setup_structured_logging, get_structured_logger

VERSION = "1.0.0"

logger = get_structured_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan with fail-fast validation"""
    try:
        validate_config_on_startup()
    except SystemExit:
        logger.error("Configuration validation failed - aborting startup")
        raise

    config = get_config()
    setup_structured_logging(config.log_level)
    sentry_enabled = init_sentry(config)
    logger.info(
        "Starting MultiMediaBlast Backend API",
        environment=config.environment,
        sentry=sentry_enabled
    )

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title="MultiMediaBlast API",
    description="Cross-post media and text to linked YouTube, TikTok, Instagram and Facebook accounts",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Platforms", "description": "OAuth account linking"},
        {"name": "Posts", "description": "Post submission, publishing and management"},
        {"name": "Billing", "description": "Subscription checkout and status"},
        {"name": "Health", "description": "System health and monitoring"}
    ]
)

# The last middleware added runs outermost
app.add_middleware(RequestContextMiddleware)
app.add_middleware(GlobalExceptionHandler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix="/api")


@app.get("/metrics", include_in_schema=False)
async def get_metrics():
    """Prometheus metrics endpoint"""
    return Response(
        generate_latest(registry),
        media_type=CONTENT_TYPE_LATEST
    )


@app.get("/health", tags=["Health"])
async def health_check() -> dict:
    """Health check endpoint with database status"""
    services = {}

    try:
        async with get_session() as db:
            await db.execute(text("SELECT 1"))
        services["database"] = "healthy"
    except Exception as e:
        services["database"] = "unhealthy"
        logger.error("Database health check failed", error=str(e))

    health_data = {
        "status": "healthy" if all(s == "healthy" for s in services.values()) else "degraded",
        "timestamp": datetime.now(timezone.utc),
        "version": VERSION,
        "services": services,
    }

    return format_success_response(HealthResponse(**health_data))


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with API information"""
    api_info = {
        "message": "MultiMediaBlast Backend API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
        "api_base": "/api/v1"
    }

    return format_success_response(api_info)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=os.getenv("ENVIRONMENT") == "development"
    )
