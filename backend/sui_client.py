"""
Async JSON-RPC client for a Sui full node.

Every method is a single round trip. Failures surface as SuiRpcError with a
typed RpcErrorCause; this module is the only place that inspects raw node
error codes and messages.
"""
import itertools
import logging
from typing import Any, Optional

import httpx

from exceptions import RpcErrorCause, SuiRpcError

logger = logging.getLogger(__name__)

NETWORK_RPC_URLS = {
    "mainnet": "https://fullnode.mainnet.sui.io:443",
    "testnet": "https://fullnode.testnet.sui.io:443",
    "devnet": "https://fullnode.devnet.sui.io:443",
    "localnet": "http://127.0.0.1:9000",
}

JSONRPC_INVALID_PARAMS = -32602

# Node messages meaning an input object can no longer be spent at the version
# the transaction references.
_OBJECT_UNAVAILABLE_MARKERS = (
    "unavailable for consumption",
    "objectversionunavailableforconsumption",
    "inputobjectdeleted",
    "objectnotfound",
    "object deleted",
    "has been deleted",
    "already locked",
    "objectlockconflict",
    "equivocated",
    # spent into another owner's hands before this transaction was built
    "is owned by account address",
    "but given owner/signer address",
)

_SIGNATURE_MARKERS = (
    "invalid user signature",
    "signature is not valid",
    "invalidsignature",
)


def rpc_url_for_network(network: str) -> str:
    """Resolve the public full-node URL for a network name."""
    try:
        return NETWORK_RPC_URLS[network.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown Sui network '{network}'. "
            f"Expected one of: {', '.join(NETWORK_RPC_URLS)} (or set SUI_RPC_URL)"
        )


def classify_rpc_error(method: str, code: Optional[int], message: str) -> RpcErrorCause:
    """Map a JSON-RPC error object onto an RpcErrorCause."""
    lower = message.lower()

    if any(marker in lower for marker in _OBJECT_UNAVAILABLE_MARKERS):
        return RpcErrorCause.OBJECT_UNAVAILABLE
    if any(marker in lower for marker in _SIGNATURE_MARKERS):
        return RpcErrorCause.INVALID_SIGNATURE
    if code == JSONRPC_INVALID_PARAMS or "invalid params" in lower:
        # queryEvents answers -32602 for a Move event type that was never emitted
        if method == "suix_queryEvents":
            return RpcErrorCause.UNKNOWN_EVENT_TYPE
        return RpcErrorCause.INVALID_PARAMS
    return RpcErrorCause.RPC_ERROR


def classify_execution_failure(error: str) -> RpcErrorCause:
    """Map the effects.status.error string of a failed execution."""
    lower = error.lower()
    if any(marker in lower for marker in _OBJECT_UNAVAILABLE_MARKERS):
        return RpcErrorCause.OBJECT_UNAVAILABLE
    return RpcErrorCause.EXECUTION_FAILED


class SuiClient:
    """Thin async wrapper over the Sui JSON-RPC API."""

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self._ids = itertools.count(1)
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "SuiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def _request(self, method: str, params: list) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            response = await self._http.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Sui RPC transport failure on {method}: {e}")
            raise SuiRpcError(
                RpcErrorCause.NETWORK, f"{type(e).__name__}: {e}", method=method
            ) from e
        except ValueError as e:
            raise SuiRpcError(
                RpcErrorCause.NETWORK, f"Malformed JSON-RPC response: {e}", method=method
            ) from e

        error = body.get("error")
        if error:
            code = error.get("code")
            message = str(error.get("message", ""))
            if error.get("data"):
                message = f"{message}: {error['data']}"
            cause = classify_rpc_error(method, code, message)
            logger.debug(f"Sui RPC error on {method} ({cause.value}): {message}")
            raise SuiRpcError(cause, message, method=method, code=code)

        return body.get("result")

    # ── Reads ───────────────────────────────────────────────────────

    async def get_object(
        self, object_id: str, *, show_content: bool = True, show_type: bool = True
    ) -> dict:
        """sui_getObject with content/type projection flags."""
        options = {"showContent": show_content, "showType": show_type}
        return await self._request("sui_getObject", [object_id, options])

    async def get_coins(
        self,
        owner: str,
        coin_type: Optional[str] = None,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> dict:
        """One page of suix_getCoins: {data, nextCursor, hasNextPage}."""
        return await self._request("suix_getCoins", [owner, coin_type, cursor, limit])

    async def query_events(
        self,
        event_type: str,
        cursor: Optional[dict] = None,
        limit: Optional[int] = None,
        descending: bool = True,
    ) -> dict:
        """One page of suix_queryEvents filtered by Move event type."""
        query = {"MoveEventType": event_type}
        return await self._request("suix_queryEvents", [query, cursor, limit, descending])

    async def get_latest_checkpoint(self) -> int:
        result = await self._request("sui_getLatestCheckpointSequenceNumber", [])
        return int(result)

    # ── Writes ──────────────────────────────────────────────────────

    async def unsafe_move_call(
        self,
        signer: str,
        package_id: str,
        module: str,
        function: str,
        type_arguments: list,
        arguments: list,
        gas_budget: int,
        gas: Optional[str] = None,
    ) -> dict:
        """
        Ask the node to build MoveCall transaction bytes.

        Returns {txBytes (base64), gas, inputObjects}. Nothing is executed.
        """
        return await self._request(
            "unsafe_moveCall",
            [signer, package_id, module, function, type_arguments, arguments, gas, str(gas_budget)],
        )

    async def execute_transaction_block(
        self,
        tx_bytes: str,
        signatures: list[str],
        options: Optional[dict] = None,
        request_type: str = "WaitForLocalExecution",
    ) -> dict:
        """
        Submit a signed transaction and wait for its effects.

        A transaction that executes but fails (Move abort, consumed input)
        raises SuiRpcError carrying the digest, since it was sequenced.
        """
        if options is None:
            options = {"showEffects": True, "showEvents": True}

        result = await self._request(
            "sui_executeTransactionBlock", [tx_bytes, signatures, options, request_type]
        )

        status = (result.get("effects") or {}).get("status") or {}
        if status.get("status", "success") != "success":
            error = str(status.get("error", "unknown execution failure"))
            raise SuiRpcError(
                classify_execution_failure(error),
                error,
                method="sui_executeTransactionBlock",
                digest=result.get("digest"),
            )
        return result
