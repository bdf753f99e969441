"""
Pytest configuration and shared fixtures for SuiFlow tests.

Provides an in-memory fake of the Sui JSON-RPC client, deterministic
signing identities, and a wired PaymentOrchestrator.
"""
import asyncio
import base64
import json
from collections import Counter

import pytest

from config import ProcessorConfig
from exceptions import RpcErrorCause, SuiRpcError
from services.payment_service import PaymentOrchestrator
from services.signing import Ed25519Signer

PACKAGE_ID = "0x" + "a1" * 32
PROCESSOR_ID = "0x" + "b2" * 32
MERCHANT_ADDRESS = "0x" + "c3" * 32


def coin_id(n: int) -> str:
    return "0x" + f"{n:064x}"


class FakeSuiClient:
    """
    In-memory stand-in for SuiClient with the same method signatures.

    Every method yields to the event loop once, so concurrent callers
    interleave the way they would against a real node. A coin spent by an
    executed payment is marked consumed; a second execution that spends it
    fails with OBJECT_UNAVAILABLE, as the ledger does.
    """

    def __init__(self):
        self.coins: dict[str, list[dict]] = {}
        self.objects: dict[str, dict] = {}
        self.events: dict[str, list[dict]] = {}   # event type -> newest first
        self.consumed: set[str] = set()
        self.executed: list[dict] = []
        self.calls: Counter = Counter()
        self.call_log: list[tuple[str, dict]] = []
        self.failures: dict[str, SuiRpcError] = {}
        self.checkpoint = 1_000
        self._next_coin = 1

    # ── Test setup helpers ───────────────────────────────────────────

    def add_coin(self, owner: str, balance: int) -> str:
        object_id = coin_id(self._next_coin)
        self._next_coin += 1
        self.coins.setdefault(owner, []).append({
            "coinType": "0x2::sui::SUI",
            "coinObjectId": object_id,
            "version": str(self._next_coin),
            "digest": f"digest-{object_id[-6:]}",
            "balance": str(balance),
            "previousTransaction": "prev",
        })
        return object_id

    def fail(self, method: str, cause: RpcErrorCause, message: str = "injected failure"):
        self.failures[method] = SuiRpcError(cause, message, method=method)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def _enter(self, method: str, **params):
        self.calls[method] += 1
        self.call_log.append((method, params))
        await asyncio.sleep(0)
        if method in self.failures:
            raise self.failures[method]

    # ── SuiClient surface ────────────────────────────────────────────

    async def get_object(self, object_id, *, show_content=True, show_type=True):
        await self._enter("sui_getObject", object_id=object_id)
        if object_id not in self.objects:
            return {"error": {"code": "notExists", "object_id": object_id}}
        return self.objects[object_id]

    async def get_coins(self, owner, coin_type=None, cursor=None, limit=None):
        await self._enter("suix_getCoins", owner=owner, cursor=cursor, limit=limit)
        live = [c for c in self.coins.get(owner, []) if c["coinObjectId"] not in self.consumed]
        start = int(cursor) if cursor else 0
        size = limit or 50
        page = live[start:start + size]
        has_next = start + size < len(live)
        return {
            "data": page,
            "nextCursor": str(start + size) if has_next else None,
            "hasNextPage": has_next,
        }

    async def query_events(self, event_type, cursor=None, limit=None, descending=True):
        await self._enter("suix_queryEvents", event_type=event_type, cursor=cursor, limit=limit)
        if event_type not in self.events:
            raise SuiRpcError(
                RpcErrorCause.UNKNOWN_EVENT_TYPE,
                "Invalid params",
                method="suix_queryEvents",
                code=-32602,
            )
        events = self.events[event_type] if descending else list(reversed(self.events[event_type]))
        start = 0
        if cursor is not None:
            start = next(i for i, ev in enumerate(events) if ev["id"] == cursor) + 1
        size = limit or 50
        page = events[start:start + size]
        return {
            "data": page,
            "nextCursor": page[-1]["id"] if page else None,
            "hasNextPage": start + size < len(events),
        }

    async def get_latest_checkpoint(self):
        await self._enter("sui_getLatestCheckpointSequenceNumber")
        return self.checkpoint

    async def unsafe_move_call(
        self, signer, package_id, module, function, type_arguments, arguments, gas_budget, gas=None
    ):
        await self._enter("unsafe_moveCall", signer=signer, function=function)
        tx = {
            "sender": signer,
            "target": f"{package_id}::{module}::{function}",
            "arguments": arguments,
            "gasBudget": str(gas_budget),
        }
        return {"txBytes": base64.b64encode(json.dumps(tx).encode()).decode()}

    async def execute_transaction_block(
        self, tx_bytes, signatures, options=None, request_type="WaitForLocalExecution"
    ):
        await self._enter("sui_executeTransactionBlock")
        tx = json.loads(base64.b64decode(tx_bytes))
        if not signatures or not signatures[0]:
            raise SuiRpcError(RpcErrorCause.INVALID_SIGNATURE, "Invalid user signature")

        if tx["target"].endswith("::process_widget_payment"):
            spent = tx["arguments"][4]
            if spent in self.consumed:
                raise SuiRpcError(
                    RpcErrorCause.OBJECT_UNAVAILABLE,
                    f"Object {spent} unavailable for consumption",
                    method="sui_executeTransactionBlock",
                )
            self.consumed.add(spent)

        digest = f"Digest{len(self.executed) + 1}"
        self.executed.append({"digest": digest, **tx})
        return {
            "digest": digest,
            "effects": {"status": {"status": "success"}},
            "events": [],
        }


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def fake_client() -> FakeSuiClient:
    return FakeSuiClient()


@pytest.fixture
def processor_config() -> ProcessorConfig:
    return ProcessorConfig(
        package_id=PACKAGE_ID,
        processor_object_id=PROCESSOR_ID,
        payment_amount=50,
        admin_fee=10,
        gas_budget=10_000_000,
    )


@pytest.fixture
def customer() -> Ed25519Signer:
    """Fixed-seed customer identity."""
    return Ed25519Signer(bytes(range(32)))


@pytest.fixture
def admin() -> Ed25519Signer:
    """Fixed-seed admin identity."""
    return Ed25519Signer(bytes([7] * 32))


@pytest.fixture
def orchestrator(fake_client, processor_config, admin) -> PaymentOrchestrator:
    return PaymentOrchestrator(fake_client, processor_config, admin)


@pytest.fixture
def payment_event():
    """Factory for raw suix_queryEvents PaymentCompleted entries."""
    def _make(seq: int, timestamp_ms: int, total: int = 60, fee: int = 10, merchant_id: str = "shop"):
        return {
            "id": {"txDigest": f"Tx{seq}", "eventSeq": str(seq)},
            "packageId": PACKAGE_ID,
            "transactionModule": "payment_processor",
            "sender": MERCHANT_ADDRESS,
            "type": f"{PACKAGE_ID}::payment_processor::PaymentCompleted",
            "parsedJson": {
                "merchant_address": MERCHANT_ADDRESS,
                "merchant_id": list(merchant_id.encode()),
                "product_id": list(b"widget"),
                "total_amount": str(total),
                "merchant_received": str(total - fee),
                "admin_fee": str(fee),
            },
            "timestampMs": str(timestamp_ms),
        }
    return _make


def make_processor_object(**overrides) -> dict:
    """sui_getObject response for the processor; ``overrides`` replace struct fields."""
    fields = {
        "id": {"id": PROCESSOR_ID},
        "admin_address": "0x" + "d4" * 32,
        "total_fees_collected": "30",
        "total_payments_processed": "3",
        "admin_balance": "20",
    }
    fields.update(overrides)
    return {
        "data": {
            "objectId": PROCESSOR_ID,
            "version": "12",
            "digest": "ObjDigest",
            "type": f"{PACKAGE_ID}::payment_processor::PaymentProcessor",
            "content": {
                "dataType": "moveObject",
                "type": f"{PACKAGE_ID}::payment_processor::PaymentProcessor",
                "hasPublicTransfer": False,
                "fields": fields,
            },
        }
    }
