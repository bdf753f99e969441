"""
Holdings endpoint: coins an account can pay with.
"""
from fastapi import APIRouter, Depends

from deps import get_orchestrator
from domain.responses import ERROR_RESPONSES, success_response
from services.payment_service import PaymentOrchestrator
from utils.validators import validated_address

router = APIRouter(prefix="/api", tags=["coins"])


@router.get("/coins/{address}", responses=ERROR_RESPONSES)
async def list_coins(
    address: str = Depends(validated_address),
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
):
    """All coins of the configured type owned by ``address``, in node order."""
    units = await orchestrator.list_funding_units(address)
    return success_response(
        [{"objectId": u.id, "balance": str(u.balance), "digest": u.proof_handle} for u in units],
        meta={"count": len(units)},
    )
