"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException
from ecocity.core.settings import settings
from ecocity.services.inference.base import InferenceProvider
from ecocity.services.inference.registry import get_inference_provider
from ecocity.services.signal_store.base import SignalStore
from ecocity.services.signal_store.registry import get_signal_store
from ecocity.utils.time_windows import utc_now


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check(provider: InferenceProvider = Depends(get_inference_provider)):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "inference": provider.get_model_info(),
        "timestamp": utc_now().isoformat(),
    }


@router.get("/db")
def database_health(store: SignalStore = Depends(get_signal_store)):
    """
    Store connectivity check.
    Runs an empty-window query against the report collection.
    """
    try:
        store.query_signals(cutoff=utc_now())
        return {
            "status": "healthy",
            "database": type(store).__name__,
            "connected": True,
            "timestamp": utc_now().isoformat(),
        }
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )
