"""
Custom exception classes for Sui node operations.

Raw node failures are classified once, in sui_client.py, into an
RpcErrorCause so that services branch on the cause and never on message text.
"""
from enum import Enum


class RpcErrorCause(str, Enum):
    """Structured cause of a failed ledger round trip."""

    NETWORK = "network"                        # transport failure, timeout, bad HTTP status
    INVALID_PARAMS = "invalid_params"          # JSON-RPC -32602 on anything but event queries
    UNKNOWN_EVENT_TYPE = "unknown_event_type"  # event topic never emitted on-chain
    OBJECT_UNAVAILABLE = "object_unavailable"  # input object consumed, deleted or locked
    INVALID_SIGNATURE = "invalid_signature"
    EXECUTION_FAILED = "execution_failed"      # effects status == failure (Move abort etc.)
    RPC_ERROR = "rpc_error"


class SuiRpcError(Exception):
    """Raised when a call to the Sui full node fails."""

    def __init__(
        self,
        cause: RpcErrorCause,
        message: str,
        *,
        method: str | None = None,
        code: int | None = None,
        digest: str | None = None,
    ):
        super().__init__(message)
        self.cause = cause
        self.message = message
        self.method = method
        self.code = code
        self.digest = digest

    def __repr__(self) -> str:
        return f"SuiRpcError(cause={self.cause.value!r}, method={self.method!r}, message={self.message!r})"
