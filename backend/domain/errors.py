"""
Custom domain exceptions for consistent error handling.

These exceptions propagate undisguised from the services to their caller.
The API layer renders them through the exception handler in main.py; every
surfaced core error maps to HTTP 500 with a machine-readable ``code`` and a
``funds`` hint telling the client whether value may have moved.
"""
from fastapi import HTTPException, status

from domain.enums import FundsMovement


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""

    code = "domain_error"
    funds = FundsMovement.NONE

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ── Funding ─────────────────────────────────────────────────────────


class InsufficientFundsError(DomainError):
    """No funding unit in the account meets the required amount."""

    code = "insufficient_funds"
    funds = FundsMovement.NOT_MOVED

    def __init__(self, owner: str, required: int, largest: int | None = None):
        message = f"Insufficient balance: no coin owned by {owner} holds at least {required} MIST"
        super().__init__(message, details={"owner": owner, "required": required, "largestBalance": largest})
        self.required = required


class StaleFundingReferenceError(DomainError):
    """A pre-supplied funding unit no longer exists or no longer covers the amount."""

    code = "stale_funding_reference"
    funds = FundsMovement.NOT_MOVED

    def __init__(self, unit_id: str, reason: str):
        super().__init__(
            f"Funding unit {unit_id} is no longer valid: {reason}",
            details={"unitId": unit_id, "reason": reason},
        )
        self.unit_id = unit_id


class UnauthorizedOperationError(DomainError):
    """Admin operation attempted without a configured admin identity."""

    code = "unauthorized_operation"
    funds = FundsMovement.NOT_MOVED


class InvalidArgumentError(DomainError):
    code = "invalid_argument"
    funds = FundsMovement.NOT_MOVED

    def __init__(self, message: str, field: str | None = None):
        if field:
            message = f"Invalid argument '{field}': {message}"
        super().__init__(message, details={"field": field} if field else None)


# ── Submission ──────────────────────────────────────────────────────


class SubmissionError(DomainError):
    """Signing, broadcasting or executing a transaction failed."""

    code = "submission_error"
    funds = FundsMovement.UNKNOWN

    def __init__(self, message: str, cause: Exception | None = None, digest: str | None = None):
        details = {"digest": digest} if digest else None
        super().__init__(message, details=details)
        self.cause = cause
        self.digest = digest


class UnitAlreadyConsumedError(SubmissionError):
    """The funding unit was spent by another transaction first."""

    code = "unit_already_consumed"
    funds = FundsMovement.NOT_MOVED


class NetworkFailureError(SubmissionError):
    """The node could not be reached or did not answer; the outcome is unknown."""

    code = "network_failure"
    funds = FundsMovement.UNKNOWN


class UnsentNetworkFailureError(NetworkFailureError):
    """The node was unreachable while building the transaction; nothing was signed or sent."""

    code = "network_failure_unsent"
    funds = FundsMovement.NOT_MOVED


class OnChainAbortError(SubmissionError):
    """The transaction was rejected by the node or aborted during execution."""

    code = "on_chain_abort"
    funds = FundsMovement.REJECTED


class SignatureRejectedError(SubmissionError):
    """The signer failed to sign or the node rejected the signature."""

    code = "signature_rejected"
    funds = FundsMovement.NOT_MOVED


class SubmissionOutcomeUnknownError(SubmissionError):
    """The local deadline expired; the transaction may still be accepted."""

    code = "outcome_unknown"
    funds = FundsMovement.UNKNOWN


# ── Read paths ──────────────────────────────────────────────────────


class ObjectNotFoundError(DomainError):
    code = "object_not_found"

    def __init__(self, object_id: str, reason: str = "object does not exist"):
        super().__init__(f"Object not found: {object_id} ({reason})", details={"objectId": object_id})
        self.object_id = object_id


class SchemaMismatchError(DomainError):
    """On-chain data no longer matches the shape this client expects."""

    code = "schema_mismatch"

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message, details={"missingFields": missing} if missing else None)
        self.missing = missing or []


class QueryFailedError(DomainError):
    """A read query to the ledger failed; safe to retry."""

    code = "query_failed"

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause
