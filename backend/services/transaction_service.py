"""
Transaction service: build, sign, submit and confirm a MoveCall.

Flow:
  1) unsafe_moveCall            node builds TransactionData bytes for the signer
  2) signer.sign_transaction    intent-prefixed Ed25519 signature
  3) executeTransactionBlock    WaitForLocalExecution, effects + events returned

There is no automatic retry. A submission that failed after broadcast may
still have been applied, so the caller must re-query holdings before trying
again.
"""
import asyncio
import logging
from typing import Awaitable, TypeVar

from domain.errors import (
    NetworkFailureError,
    OnChainAbortError,
    SignatureRejectedError,
    SubmissionError,
    SubmissionOutcomeUnknownError,
    UnitAlreadyConsumedError,
    UnsentNetworkFailureError,
)
from exceptions import RpcErrorCause, SuiRpcError
from models import SubmissionResult
from services.call_encoder import EncodedCall
from services.signing import SigningIdentity
from utils.validators import validate_base64

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXECUTE_OPTIONS = {"showEffects": True, "showEvents": True}


def classify_error(error: SuiRpcError, *, broadcast: bool) -> SubmissionError:
    """
    Translate a ledger error into the SubmissionError subtype the caller acts on.

    ``broadcast`` is True once signed bytes were sent for execution; before that
    point nothing can have moved: an unreachable node is reported as unsent and
    any other node error counts as a rejection.
    """
    cause = error.cause
    if cause is RpcErrorCause.OBJECT_UNAVAILABLE:
        return UnitAlreadyConsumedError(
            f"Funding coin already consumed: {error.message}", cause=error, digest=error.digest
        )
    if cause is RpcErrorCause.INVALID_SIGNATURE:
        return SignatureRejectedError(f"Signature rejected: {error.message}", cause=error)
    if cause is RpcErrorCause.EXECUTION_FAILED:
        return OnChainAbortError(
            f"Transaction aborted on-chain: {error.message}", cause=error, digest=error.digest
        )
    if cause is RpcErrorCause.NETWORK:
        if not broadcast:
            return UnsentNetworkFailureError(f"Network failure before broadcast: {error.message}", cause=error)
        return NetworkFailureError(f"Network failure: {error.message}", cause=error)
    if cause is RpcErrorCause.INVALID_PARAMS or not broadcast:
        return OnChainAbortError(f"Transaction rejected by node: {error.message}", cause=error)
    return NetworkFailureError(f"Submission failed: {error.message}", cause=error)


class TransactionSubmitter:
    """Executes EncodedCalls against the ledger."""

    def __init__(self, client, gas_budget: int):
        self._client = client
        self._gas_budget = gas_budget

    async def submit(self, call: EncodedCall, signer: SigningIdentity) -> SubmissionResult:
        """
        Submit ``call`` signed by ``signer`` and wait for execution.

        Returns:
            SubmissionResult with the transaction digest

        Raises:
            SubmissionError subtype; the underlying cause is chained.
        """
        logger.info(f"Submitting {call.target} as {signer.address}")

        try:
            built = await self._client.unsafe_move_call(
                signer.address,
                call.package_id,
                call.module,
                call.function,
                list(call.type_arguments),
                call.rpc_arguments(),
                self._gas_budget,
            )
        except SuiRpcError as e:
            logger.error(f"Building {call.function} failed ({e.cause.value}): {e.message}")
            raise classify_error(e, broadcast=False) from e

        tx_bytes_b64 = built["txBytes"]
        tx_bytes = validate_base64(tx_bytes_b64)

        try:
            signature = await signer.sign_transaction(tx_bytes)
        except Exception as e:
            logger.error(f"Signing {call.function} failed for {signer.address}: {e}")
            raise SignatureRejectedError(f"Signer failed to sign transaction: {e}", cause=e) from e

        try:
            result = await self._client.execute_transaction_block(
                tx_bytes_b64, [signature], options=EXECUTE_OPTIONS
            )
        except SuiRpcError as e:
            logger.error(
                f"Execution of {call.function} failed ({e.cause.value})"
                f"{f' digest={e.digest}' if e.digest else ''}: {e.message}"
            )
            raise classify_error(e, broadcast=True) from e

        digest = result["digest"]
        logger.info(f"{call.function} executed: {digest}")
        return SubmissionResult(
            transaction_digest=digest,
            raw_effects=result.get("effects"),
            events=result.get("events") or [],
        )


async def race_with_deadline(submission: Awaitable[T], timeout: float) -> T:
    """
    Wait up to ``timeout`` seconds for a submission.

    On timeout the submission keeps running (the transaction may still be
    accepted) and SubmissionOutcomeUnknownError is raised.
    """
    task = asyncio.ensure_future(submission)
    done, _ = await asyncio.wait({task}, timeout=timeout)
    if task in done:
        return task.result()

    task.add_done_callback(_log_late_outcome)
    logger.warning(f"Submission still pending after {timeout}s; outcome unknown")
    raise SubmissionOutcomeUnknownError(
        f"No result within {timeout}s; the transaction may still be executed. "
        "Re-query holdings before retrying."
    )


def _log_late_outcome(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(f"Late submission failed: {exc}")
    else:
        logger.info(f"Late submission completed: {getattr(task.result(), 'transaction_digest', task.result())}")
