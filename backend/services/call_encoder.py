"""
Call encoder: positional arguments for payment_processor entry points.

The contract entry points are positional, so argument order here is part of
the wire contract:

    process_widget_payment(processor, merchant_address, merchant_id: vector<u8>,
                           product_id: vector<u8>, payment: Coin<SUI>)
    withdraw_admin_fees(processor)
"""
from dataclasses import dataclass, field
from typing import Union

from domain.constants import (
    PROCESS_PAYMENT_FUNCTION,
    PROCESSOR_MODULE,
    WITHDRAW_FEES_FUNCTION,
)

CallArgument = Union[str, bytes]


@dataclass(frozen=True)
class EncodedCall:
    """A fully-specified MoveCall, independent of any signer."""

    package_id: str
    module: str
    function: str
    arguments: tuple[CallArgument, ...]
    type_arguments: tuple[str, ...] = field(default_factory=tuple)

    @property
    def target(self) -> str:
        return f"{self.package_id}::{self.module}::{self.function}"

    def rpc_arguments(self) -> list:
        """Arguments as SuiJson: byte vectors become lists of u8."""
        return [list(arg) if isinstance(arg, bytes) else arg for arg in self.arguments]


def encode_identifier(value: str) -> bytes:
    """UTF-8 bytes for a vector<u8> identifier. Empty input gives empty bytes."""
    return value.encode("utf-8")


def encode_payment_call(
    package_id: str,
    processor_id: str,
    merchant_address: str,
    merchant_id: str,
    product_id: str,
    funding_unit_id: str,
) -> EncodedCall:
    return EncodedCall(
        package_id=package_id,
        module=PROCESSOR_MODULE,
        function=PROCESS_PAYMENT_FUNCTION,
        arguments=(
            processor_id,
            merchant_address,
            encode_identifier(merchant_id),
            encode_identifier(product_id),
            funding_unit_id,
        ),
    )


def encode_withdraw_call(package_id: str, processor_id: str) -> EncodedCall:
    return EncodedCall(
        package_id=package_id,
        module=PROCESSOR_MODULE,
        function=WITHDRAW_FEES_FUNCTION,
        arguments=(processor_id,),
    )
