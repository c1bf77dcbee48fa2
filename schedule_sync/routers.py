from fastapi import APIRouter, HTTPException
import logging

from schedule_sync import __version__
from schedule_sync.schemas import HealthResponse, SyncResponse
from schedule_sync.services import run_sync
from schedule_sync.services.sync_coordinator import get_sync_coordinator


logger = logging.getLogger(__name__)

main_router = APIRouter()

@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    return {
        "service": "Schedule Sync Service",
        "version": __version__,
        "endpoints": {
            "sync": "/sync - Reconcile the stored schedule with the feed (POST)",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint"""
    return HealthResponse(status="ok", sync_running=get_sync_coordinator().is_running())


@main_router.post("/sync", response_model=SyncResponse)
async def trigger_sync() -> dict:
    """
    Manually trigger a reconciliation run

    This will retrieve the configured feed (GUIDE_URL) and reconcile the stored schedule against it
    """
    logger.info("Manual schedule sync triggered via API")
    result = await run_sync()

    if result.get("status") == "skipped":
        raise HTTPException(status_code=409, detail=result["message"])
    if result.get("status") == "error":
        raise HTTPException(status_code=500, detail=result["error"])

    return result
