"""
Value-moving endpoints: process a payment, withdraw admin fees.

Both are rate-limited per client IP. Process-payment signs server-side with
the caller's key; the key is used for this request only and never logged.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from config import settings
from deps import get_orchestrator
from domain.responses import ERROR_RESPONSES, success_response
from middleware.rate_limit import rate_limit
from models import PaymentRequest, ProcessPaymentBody, TransactionReceipt
from services.payment_service import PaymentOrchestrator
from services.signing import Ed25519Signer
from utils.validators import validate_sui_address

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["payments"])


@router.post("/process-payment", responses=ERROR_RESPONSES, dependencies=[Depends(rate_limit())])
async def process_payment(
    body: ProcessPaymentBody,
    orchestrator: PaymentOrchestrator = Depends(get_orchestrator),
):
    """
    Pay a merchant from the customer's coin.

    The coin in ``paymentCoinId`` is re-checked against the customer's
    current holdings before anything is signed.
    """
    validate_sui_address(body.merchant_address, "merchantAddress")

    try:
        signer = Ed25519Signer.from_base64(body.customer_private_key)
    except ValueError as e:
        logger.warning(f"Rejected payment for {body.merchant_id}/{body.product_id}: {e}")
        raise HTTPException(status_code=400, detail="Invalid customerPrivateKey: expected a base64 Ed25519 key")

    request = PaymentRequest(
        merchant_address=body.merchant_address,
        merchant_id=body.merchant_id,
        product_id=body.product_id,
        funding_unit_id=body.payment_coin_id,
        amount=body.amount,
    )
    result = await orchestrator.process_payment(
        request, signer, deadline=settings.submission_timeout_seconds
    )
    receipt = TransactionReceipt(
        transaction_digest=result.transaction_digest,
        message="Payment processed successfully",
    )
    return success_response(receipt)


@router.post("/withdraw-fees", responses=ERROR_RESPONSES, dependencies=[Depends(rate_limit())])
async def withdraw_fees(orchestrator: PaymentOrchestrator = Depends(get_orchestrator)):
    """Move accumulated admin fees to the configured admin account."""
    result = await orchestrator.withdraw_admin_fees(deadline=settings.submission_timeout_seconds)
    receipt = TransactionReceipt(
        transaction_digest=result.transaction_digest,
        message="Admin fees withdrawn successfully",
    )
    return success_response(receipt)
