"""
Input validation utilities for the SuiFlow payment backend.

Provides reusable validators for Sui addresses / object IDs and base64 input.
"""
import base64
import binascii
import re

from fastapi import HTTPException, Path

_HEX_ID_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def is_valid_sui_address(value: str | None) -> bool:
    """True for a 0x-prefixed hex string of 1 to 64 digits (addresses and object IDs)."""
    return bool(value) and bool(_HEX_ID_RE.match(value))


def normalize_sui_address(value: str) -> str:
    """Left-pad an address or object ID to the canonical 32-byte form."""
    return "0x" + value[2:].lower().rjust(64, "0")


def validate_sui_address(address: str, field: str = "address") -> str:
    """
    Validate a Sui address format.

    Returns:
        The validated address (unchanged)

    Raises:
        HTTPException(400) if the address is invalid
    """
    if not address:
        raise HTTPException(status_code=400, detail=f"{field} is required")

    if not is_valid_sui_address(address):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid Sui {field}: expected 0x followed by up to 64 hex characters",
        )

    return address


def validated_address(address: str = Path(..., description="Sui account address")) -> str:
    """FastAPI dependency for validating address path parameters."""
    return validate_sui_address(address)


def fix_base64_padding(b64_str: str) -> str:
    """Ensure proper base64 padding (must be multiple of 4)."""
    padding_needed = len(b64_str) % 4
    if padding_needed:
        b64_str += '=' * (4 - padding_needed)
    return b64_str


def validate_base64(b64_str: str) -> bytes:
    """Validate and decode a base64 string. Returns raw bytes."""
    padded = fix_base64_padding(b64_str.strip())
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 encoding: {e}")
