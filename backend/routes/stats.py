"""
Processor statistics endpoint.
"""
from fastapi import APIRouter, Depends

from deps import get_orchestrator
from domain.responses import ERROR_RESPONSES, success_response
from services.payment_service import PaymentOrchestrator

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", responses=ERROR_RESPONSES)
async def get_stats(orchestrator: PaymentOrchestrator = Depends(get_orchestrator)):
    """Admin address and running totals, read fresh from the processor object."""
    stats = await orchestrator.get_contract_stats()
    return success_response(stats)
