"""
Health Check API Routes
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from src.api.dependencies import get_app_container
from src.infrastructure.container import Container

router = APIRouter()


@router.get("/health", summary="Health check")
async def health_check(container: Container = Depends(get_app_container)):
    """Report liveness and remaining outbound call budget."""
    limiter = container.rate_limiter
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "storage": container.settings.storage_type,
        "rateLimiter": {
            "remaining": limiter.remaining,
            "maxCalls": limiter.max_calls,
            "windowSeconds": limiter.window_seconds,
        },
    }
