"""
Health check endpoint.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from config import settings
from deps import get_sui_client
from exceptions import SuiRpcError
from sui_client import SuiClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(client: SuiClient = Depends(get_sui_client)):
    """Health check: verifies Sui full-node connectivity."""
    try:
        checkpoint = await client.get_latest_checkpoint()
        return {
            "success": True,
            "status": "healthy",
            "network": settings.network,
            "sui_connected": True,
            "latest_checkpoint": checkpoint,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    except SuiRpcError as e:
        logger.error(f"Health check failed: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": False,
                "status": "unhealthy",
                "network": settings.network,
                "sui_connected": False,
                "error": e.cause.value,
            },
        )
