"""
Payment service: the payment orchestrator.

Ties holdings lookup, coin selection, call encoding and submission together
for the two value-moving operations (process payment, withdraw admin fees)
and passes the read paths through.

The orchestrator only holds immutable configuration and is shared by every
concurrent request. Two payments that race for the same coin are not
serialized here; the ledger accepts one and the other surfaces as
UnitAlreadyConsumedError.
"""
from __future__ import annotations

import logging
from typing import Optional

from config import ProcessorConfig
from domain.constants import DEFAULT_EVENT_LIMIT
from domain.errors import StaleFundingReferenceError, UnauthorizedOperationError
from models import ContractStats, FundingUnit, LedgerEvent, PaymentRequest, SubmissionResult
from services.call_encoder import EncodedCall, encode_payment_call, encode_withdraw_call
from services.contract_service import StatsReader
from services.event_service import EventReconciler
from services.funding_service import FundingUnitSelector
from services.signing import SigningIdentity
from services.transaction_service import TransactionSubmitter, race_with_deadline
from utils.validators import is_valid_sui_address, normalize_sui_address

logger = logging.getLogger(__name__)


def _same_object(a: str, b: str) -> bool:
    if is_valid_sui_address(a) and is_valid_sui_address(b):
        return normalize_sui_address(a) == normalize_sui_address(b)
    return a == b


class PaymentOrchestrator:
    """Entry point for payments, fee withdrawal and processor reads."""

    def __init__(
        self,
        client,
        config: ProcessorConfig,
        admin_signer: Optional[SigningIdentity] = None,
        *,
        selector: Optional[FundingUnitSelector] = None,
        submitter: Optional[TransactionSubmitter] = None,
        stats_reader: Optional[StatsReader] = None,
        event_reconciler: Optional[EventReconciler] = None,
    ):
        self._config = config
        self._admin_signer = admin_signer
        self._selector = selector or FundingUnitSelector(client, config.coin_type)
        self._submitter = submitter or TransactionSubmitter(client, config.gas_budget)
        self._stats_reader = stats_reader or StatsReader(client, config.processor_object_id)
        self._events = event_reconciler or EventReconciler(client, config.package_id)

    @property
    def config(self) -> ProcessorConfig:
        return self._config

    @property
    def admin_address(self) -> Optional[str]:
        return self._admin_signer.address if self._admin_signer else None

    # ── Value-moving operations ─────────────────────────────────────

    async def process_payment(
        self,
        request: PaymentRequest,
        signer: SigningIdentity,
        *,
        deadline: Optional[float] = None,
    ) -> SubmissionResult:
        """
        Pay ``request`` from the signer's holdings.

        The required balance is the product price (``request.amount`` or the
        configured default) plus the admin fee. Holdings are always re-read;
        a caller-supplied coin is only used if it is still owned and still
        large enough.

        ``deadline`` bounds only the submission; holdings reads before it are
        not timed.

        Raises:
            InsufficientFundsError: no coin meets the requirement (nothing submitted)
            StaleFundingReferenceError: the supplied coin is gone or too small
            QueryFailedError: holdings could not be read
            SubmissionError: subtype describing how submission failed
            SubmissionOutcomeUnknownError: ``deadline`` expired during submission
        """
        required = self._config.required_amount(request.amount)
        owner = signer.address
        logger.info(
            f"Payment {request.merchant_id}/{request.product_id} from {owner}: "
            f"{required} MIST required"
        )

        if request.funding_unit_id:
            unit = await self._revalidate(owner, request.funding_unit_id, required)
        else:
            unit = await self._selector.select(owner, required)

        call = encode_payment_call(
            self._config.package_id,
            self._config.processor_object_id,
            request.merchant_address,
            request.merchant_id,
            request.product_id,
            unit.id,
        )
        result = await self._submit(call, signer, deadline)
        logger.info(f"Payment {request.merchant_id}/{request.product_id} settled: {result.transaction_digest}")
        return result

    async def _revalidate(self, owner: str, unit_id: str, required: int) -> FundingUnit:
        units = await self._selector.list_units(owner)
        for unit in units:
            if _same_object(unit.id, unit_id):
                if unit.balance < required:
                    raise StaleFundingReferenceError(
                        unit_id, f"balance {unit.balance} MIST is below the required {required} MIST"
                    )
                return unit
        raise StaleFundingReferenceError(unit_id, f"no longer owned by {owner}")

    async def withdraw_admin_fees(self, *, deadline: Optional[float] = None) -> SubmissionResult:
        """
        Move accumulated fees to the admin account.

        Raises:
            UnauthorizedOperationError: no admin identity configured (no network call made)
            SubmissionError: subtype describing how submission failed
        """
        if self._admin_signer is None:
            raise UnauthorizedOperationError(
                "Admin fee withdrawal requires an admin identity (PRIVATE_KEY is not configured)"
            )

        call = encode_withdraw_call(self._config.package_id, self._config.processor_object_id)
        result = await self._submit(call, self._admin_signer, deadline)
        logger.info(f"Admin fees withdrawn: {result.transaction_digest}")
        return result

    async def _submit(
        self, call: EncodedCall, signer: SigningIdentity, deadline: Optional[float]
    ) -> SubmissionResult:
        submission = self._submitter.submit(call, signer)
        if deadline is None:
            return await submission
        return await race_with_deadline(submission, deadline)

    # ── Reads ───────────────────────────────────────────────────────

    async def get_contract_stats(self) -> ContractStats:
        return await self._stats_reader.fetch()

    async def get_payment_events(self, limit: int = DEFAULT_EVENT_LIMIT) -> list[LedgerEvent]:
        return await self._events.payment_events(limit)

    async def get_admin_fee_events(self, limit: int = DEFAULT_EVENT_LIMIT) -> list[LedgerEvent]:
        return await self._events.admin_fee_events(limit)

    async def list_funding_units(self, address: str) -> list[FundingUnit]:
        return await self._selector.list_units(address)
