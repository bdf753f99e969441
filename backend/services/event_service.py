"""
Event service: reconcile PaymentCompleted / AdminFeeWithdrawn topics.

Events are read newest-first with suix_queryEvents, following the node's
cursor until ``limit`` events are collected or the topic is exhausted.

A topic that has never been emitted (fresh deployment) is reported by the node
as an invalid-params fault. It is indistinguishable from an empty topic for
the caller, so it is returned as an empty list rather than an error.
"""
import logging
from typing import Optional

from pydantic import ValidationError

from domain.constants import DEFAULT_EVENT_LIMIT, MAX_RPC_PAGE_SIZE, PROCESSOR_MODULE
from domain.enums import EventKind
from domain.errors import InvalidArgumentError, QueryFailedError, SchemaMismatchError
from exceptions import RpcErrorCause, SuiRpcError
from models import AdminFeeWithdrawnData, EventId, LedgerEvent, PaymentCompletedData

logger = logging.getLogger(__name__)

_PAYLOAD_MODELS = {
    EventKind.PAYMENT_COMPLETED: PaymentCompletedData,
    EventKind.ADMIN_FEE_WITHDRAWN: AdminFeeWithdrawnData,
}


def normalize_event(kind: EventKind, raw: dict) -> LedgerEvent:
    """Turn one suix_queryEvents entry into a LedgerEvent."""
    try:
        event_id = EventId.model_validate(raw["id"])
        data = _PAYLOAD_MODELS[kind].model_validate(raw.get("parsedJson") or {})
    except (KeyError, ValidationError) as e:
        raise SchemaMismatchError(f"Unexpected {kind.value} event shape: {e}") from e

    timestamp = raw.get("timestampMs")
    return LedgerEvent(
        id=event_id,
        timestamp_ms=int(timestamp) if timestamp is not None else None,
        transaction_digest=event_id.tx_digest,
        data=data,
    )


class EventReconciler:
    """Reads processor events for one package."""

    def __init__(self, client, package_id: str, module: str = PROCESSOR_MODULE):
        self._client = client
        self._package_id = package_id
        self._module = module

    def event_type(self, kind: EventKind) -> str:
        return f"{self._package_id}::{self._module}::{kind.value}"

    async def query_events(self, kind: EventKind, limit: int = DEFAULT_EVENT_LIMIT) -> list[LedgerEvent]:
        """
        Most recent events of ``kind``, newest first.

        Raises:
            InvalidArgumentError: limit is not a positive integer (no network call)
            QueryFailedError: any ledger failure other than an unknown topic
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise InvalidArgumentError("must be a positive integer", field="limit")

        kind = EventKind(kind)
        event_type = self.event_type(kind)
        events: list[LedgerEvent] = []
        cursor: Optional[dict] = None

        while len(events) < limit:
            page_size = min(limit - len(events), MAX_RPC_PAGE_SIZE)
            try:
                page = await self._client.query_events(
                    event_type, cursor=cursor, limit=page_size, descending=True
                )
            except SuiRpcError as e:
                if e.cause is RpcErrorCause.UNKNOWN_EVENT_TYPE:
                    logger.info(f"No {kind.value} events yet (topic not created on-chain)")
                    return []
                logger.error(f"Event query for {kind.value} failed ({e.cause.value}): {e.message}")
                raise QueryFailedError(f"Failed to query {kind.value} events: {e.message}", cause=e) from e

            batch = page.get("data") or []
            events.extend(normalize_event(kind, raw) for raw in batch)
            previous, cursor = cursor, page.get("nextCursor")
            if not page.get("hasNextPage") or cursor is None:
                break
            if not batch or cursor == previous:
                logger.warning(f"{kind.value} pagination stalled at cursor {cursor}; stopping early")
                break

        events = events[:limit]
        # Stable sort keeps node order for equal timestamps (same checkpoint)
        events.sort(key=lambda ev: ev.timestamp_ms or 0, reverse=True)

        if kind is EventKind.PAYMENT_COMPLETED:
            for ev in events:
                if not ev.data.reconciles:
                    logger.warning(
                        f"PaymentCompleted {ev.transaction_digest} does not reconcile: "
                        f"total={ev.data.total_amount} merchant={ev.data.merchant_received} "
                        f"fee={ev.data.admin_fee}"
                    )
        return events

    async def payment_events(self, limit: int = DEFAULT_EVENT_LIMIT) -> list[LedgerEvent]:
        return await self.query_events(EventKind.PAYMENT_COMPLETED, limit)

    async def admin_fee_events(self, limit: int = DEFAULT_EVENT_LIMIT) -> list[LedgerEvent]:
        return await self.query_events(EventKind.ADMIN_FEE_WITHDRAWN, limit)
