"""
Contract service: read the processor object's on-chain state.

The processor is a shared Move object whose fields include
``admin_address``, ``total_fees_collected`` and ``total_payments_processed``.
Every call is a fresh fetch; callers decide how often to refresh.
"""
import logging

from domain.errors import ObjectNotFoundError, QueryFailedError, SchemaMismatchError
from exceptions import SuiRpcError
from models import ContractStats

logger = logging.getLogger(__name__)

STATS_FIELDS = ("admin_address", "total_fees_collected", "total_payments_processed")


def decode_object_fields(object_id: str, response: dict) -> dict:
    """
    Extract the Move struct fields from a sui_getObject response.

    The node answers either {"data": {..., "content": {"dataType": "moveObject",
    "fields": {...}}}} or {"error": {"code": "notExists" | "deleted", ...}}.
    """
    if not response:
        raise ObjectNotFoundError(object_id, "empty response")

    if response.get("error"):
        code = response["error"].get("code", "unknown")
        raise ObjectNotFoundError(object_id, str(code))

    data = response.get("data") or {}
    content = data.get("content") or {}
    fields = content.get("fields")
    if content.get("dataType", "moveObject") != "moveObject" or not isinstance(fields, dict):
        raise ObjectNotFoundError(object_id, "object has no parseable content")
    return fields


def parse_contract_stats(fields: dict) -> ContractStats:
    missing = [name for name in STATS_FIELDS if fields.get(name) in (None, "")]
    if missing:
        raise SchemaMismatchError(
            f"Processor object is missing expected fields: {', '.join(missing)}",
            missing=missing,
        )

    try:
        # u64 values are rendered as decimal strings by the node
        return ContractStats(
            admin_address=str(fields["admin_address"]),
            total_fees_collected=int(fields["total_fees_collected"]),
            total_payments_processed=int(fields["total_payments_processed"]),
        )
    except (TypeError, ValueError) as e:
        raise SchemaMismatchError(f"Processor object fields have unexpected types: {e}") from e


class StatsReader:
    """Fetches ContractStats for one processor object."""

    def __init__(self, client, processor_object_id: str):
        self._client = client
        self._object_id = processor_object_id

    async def fetch(self) -> ContractStats:
        try:
            response = await self._client.get_object(self._object_id, show_content=True, show_type=True)
        except SuiRpcError as e:
            logger.error(f"Failed to read processor object {self._object_id}: {e.message}")
            raise QueryFailedError(f"Could not fetch processor object: {e.message}", cause=e) from e

        stats = parse_contract_stats(decode_object_fields(self._object_id, response))
        logger.debug(
            f"Processor stats: {stats.total_payments_processed} payments, "
            f"{stats.total_fees_collected} MIST fees"
        )
        return stats
