"""
EcoCity Signals - FastAPI Application Entry Point

Turns free-text citizen reports (with an optional photo) into structured
environmental signals and serves spatio-temporal aggregates of them.

DESIGN PRINCIPLES:
- Signals are extracted once, at ingestion, and never re-derived
- Photo analysis is best-effort; text-only classification always works
- Aggregates are recomputed from stored signals on every request
- Same stored data + same window = same output
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ecocity.core.exceptions import StoreError
from ecocity.core.settings import settings
from ecocity.routes import admin, analytics, health, reports


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Signal extraction and spatio-temporal aggregation for citizen environmental reports",
    debug=settings.DEBUG
)


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    """Store failures that escaped a route: no partial results."""
    logger.error(f"🔥 Store failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Storage error: {str(exc)}"}
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors before returning them."""
    logger.warning(f"🔥 Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()}
    )


# CORS origins come from settings (comma separated CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    if settings.USE_MOCK_DB:
        logger.info("Using in-memory signal store (USE_MOCK_DB=true)")
        return

    from ecocity.config.firebase import initialize_firestore
    try:
        initialize_firestore()
    except RuntimeError as e:
        logger.warning(f"Firestore initialization failed: {e}")
        logger.warning("The app will start but database operations may fail.")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(reports.router)
app.include_router(analytics.router)
app.include_router(admin.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "hotspots": "/api/analytics/hotspots?window=7d",
    }
