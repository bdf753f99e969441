"""
Event history endpoints: completed payments and admin fee withdrawals.
"""
from fastapi import APIRouter, Depends

from deps import EventQuery, event_query_params, get_orchestrator
from domain.responses import ERROR_RESPONSES, success_response
from services.payment_service import PaymentOrchestrator

router = APIRouter(prefix="/api", tags=["events"])


@router.get("/payments", responses=ERROR_RESPONSES)
async def list_payments(
    query: EventQuery = Depends(event_query_params),
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
):
    """Most recent PaymentCompleted events, newest first."""
    events = await orchestrator.get_payment_events(query["limit"])
    return success_response(events, meta={"limit": query["limit"], "count": len(events)})


@router.get("/admin-fees", responses=ERROR_RESPONSES)
async def list_admin_fee_withdrawals(
    query: EventQuery = Depends(event_query_params),
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
):
    """Most recent AdminFeeWithdrawn events, newest first."""
    events = await orchestrator.get_admin_fee_events(query["limit"])
    return success_response(events, meta={"limit": query["limit"], "count": len(events)})
