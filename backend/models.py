"""
Pydantic models for the payment domain and request/response validation.
"""
from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SuiFlowBase(BaseModel):
    """Shared base: camelCase aliases on the wire, construction by Python name or alias."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _decode_identifier(value: Any) -> Any:
    # vector<u8> fields arrive as lists of ints in parsedJson
    if isinstance(value, (list, tuple)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


DecodedIdentifier = Annotated[str, BeforeValidator(_decode_identifier)]


# ── Funding ─────────────────────────────────────────────────────────

class FundingUnit(SuiFlowBase):
    """A spendable coin object owned by an account."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., alias="objectId", description="Coin object ID")
    balance: int = Field(..., ge=0, description="Balance in MIST")
    proof_handle: str = Field("", alias="digest", description="Object digest at the queried version")
    version: Optional[str] = None

    @classmethod
    def from_rpc(cls, coin: dict) -> "FundingUnit":
        """Build from one entry of suix_getCoins.data."""
        return cls(
            id=coin["coinObjectId"],
            balance=int(coin["balance"]),
            proof_handle=coin.get("digest", ""),
            version=str(coin["version"]) if coin.get("version") is not None else None,
        )


class PaymentRequest(SuiFlowBase):
    """Immutable payment intent submitted by the application."""
    model_config = ConfigDict(frozen=True)

    merchant_address: str
    merchant_id: str
    product_id: str
    funding_unit_id: Optional[str] = Field(
        default=None,
        description="Coin to spend; re-validated against current holdings when given",
    )
    amount: Optional[int] = Field(
        default=None,
        ge=0,
        description="Product price in MIST; the configured default is used when omitted",
    )


class SubmissionResult(SuiFlowBase):
    """Outcome of one successful submission."""
    transaction_digest: str
    raw_effects: Optional[dict] = None
    events: List[dict] = Field(default_factory=list)


# ── Contract state ──────────────────────────────────────────────────

class ContractStats(SuiFlowBase):
    """Snapshot of the processor object; stale as soon as it is returned."""
    admin_address: str
    total_fees_collected: int = Field(..., ge=0)
    total_payments_processed: int = Field(..., ge=0)
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ── Events ──────────────────────────────────────────────────────────

class PaymentCompletedData(BaseModel):
    """parsedJson of a PaymentCompleted event; keys stay as the contract emits them."""
    model_config = ConfigDict(extra="allow")

    merchant_id: DecodedIdentifier
    product_id: DecodedIdentifier
    total_amount: int
    merchant_received: int
    admin_fee: int

    @property
    def reconciles(self) -> bool:
        return self.total_amount == self.merchant_received + self.admin_fee


class AdminFeeWithdrawnData(BaseModel):
    """parsedJson of an AdminFeeWithdrawn event."""
    model_config = ConfigDict(extra="allow")

    amount_withdrawn: int


class EventId(SuiFlowBase):
    tx_digest: str
    event_seq: str

    @field_validator("event_seq", mode="before")
    @classmethod
    def _seq_as_str(cls, value: Any) -> str:
        return str(value)


class LedgerEvent(SuiFlowBase):
    """A normalized event record."""
    id: EventId
    timestamp_ms: Optional[int] = None
    transaction_digest: str
    data: Union[PaymentCompletedData, AdminFeeWithdrawnData]


# ── API bodies ──────────────────────────────────────────────────────

class ProcessPaymentBody(BaseModel):
    """POST /api/process-payment."""
    merchant_address: str = Field(..., alias="merchantAddress", min_length=1)
    merchant_id: str = Field(..., alias="merchantId", min_length=1)
    product_id: str = Field(..., alias="productId", min_length=1)
    payment_coin_id: str = Field(..., alias="paymentCoinId", min_length=1)
    customer_private_key: str = Field(
        ...,
        alias="customerPrivateKey",
        min_length=1,
        description="Base64 Ed25519 secret key of the paying account",
    )
    amount: Optional[int] = Field(default=None, ge=0, description="Product price in MIST")


class TransactionReceipt(SuiFlowBase):
    transaction_digest: str
    message: str
