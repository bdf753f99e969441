"""
Signing identities for Sui transactions.

A SigningIdentity exposes the account address it controls and produces a
serialized Sui signature for transaction bytes. Two variants:

    Ed25519Signer        holds a raw Ed25519 key (operator key, API callers)
    WalletAdapterSigner  delegates to an external wallet callable

Sui signature scheme (Ed25519):
    digest     = blake2b-256(intent [0, 0, 0] || tx_bytes)
    signature  = base64(flag 0x00 || ed25519_sign(digest) || public_key)
    address    = 0x || hex(blake2b-256(flag 0x00 || public_key))
"""
from __future__ import annotations

import base64
import hashlib
import inspect
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Union

from nacl.signing import SigningKey

from utils.validators import validate_base64

ED25519_FLAG = 0x00
TRANSACTION_INTENT = bytes([0, 0, 0])  # scope=TransactionData, version=V0, app=Sui


def _blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


def transaction_digest_for_signing(tx_bytes: bytes) -> bytes:
    """Hash that is actually signed for a transaction."""
    return _blake2b_256(TRANSACTION_INTENT + tx_bytes)


def address_from_public_key(public_key: bytes, flag: int = ED25519_FLAG) -> str:
    return "0x" + _blake2b_256(bytes([flag]) + public_key).hex()


class SigningIdentity(ABC):
    """Capability to sign transactions on behalf of one account."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Sui address of the account this identity controls."""

    @abstractmethod
    async def sign_transaction(self, tx_bytes: bytes) -> str:
        """Return the serialized (base64) signature for ``tx_bytes``."""


class Ed25519Signer(SigningIdentity):
    """Signs with an in-process Ed25519 key."""

    def __init__(self, seed: bytes):
        if len(seed) != 32:
            raise ValueError(f"Ed25519 seed must be 32 bytes, got {len(seed)}")
        self._signing_key = SigningKey(seed)
        self._public_key = bytes(self._signing_key.verify_key)
        self._address = address_from_public_key(self._public_key)

    @classmethod
    def from_base64(cls, key_b64: str) -> "Ed25519Signer":
        """
        Load a key exported as base64.

        Accepts a bare 32-byte seed, the Sui keystore form (flag byte + seed),
        or a 64-byte secret key (seed + public key).
        """
        raw = validate_base64(key_b64)
        if len(raw) == 33:
            if raw[0] != ED25519_FLAG:
                raise ValueError(f"Unsupported key scheme flag {raw[0]:#04x}; only Ed25519 is supported")
            return cls(raw[1:])
        if len(raw) in (32, 64):
            return cls(raw[:32])
        raise ValueError(f"Invalid private key length: {len(raw)} bytes")

    @classmethod
    def generate(cls) -> "Ed25519Signer":
        return cls(bytes(SigningKey.generate()))

    @property
    def address(self) -> str:
        return self._address

    @property
    def public_key(self) -> bytes:
        return self._public_key

    def export_base64(self) -> str:
        """Sui keystore form: base64(flag || seed)."""
        return base64.b64encode(bytes([ED25519_FLAG]) + bytes(self._signing_key)).decode()

    async def sign_transaction(self, tx_bytes: bytes) -> str:
        signature = self._signing_key.sign(transaction_digest_for_signing(tx_bytes)).signature
        return base64.b64encode(bytes([ED25519_FLAG]) + signature + self._public_key).decode()

    def __repr__(self) -> str:
        return f"Ed25519Signer(address={self._address})"


WalletSignFn = Callable[[bytes], Union[str, Awaitable[str]]]


class WalletAdapterSigner(SigningIdentity):
    """
    Wraps an external wallet (browser bridge, KMS, hardware signer).

    ``sign_fn`` receives the raw transaction bytes and returns the serialized
    signature, either directly or as an awaitable.
    """

    def __init__(self, address: str, sign_fn: WalletSignFn):
        self._address = address
        self._sign_fn = sign_fn

    @property
    def address(self) -> str:
        return self._address

    async def sign_transaction(self, tx_bytes: bytes) -> str:
        signature = self._sign_fn(tx_bytes)
        if inspect.isawaitable(signature):
            signature = await signature
        if not isinstance(signature, str) or not signature:
            raise ValueError("Wallet adapter returned an empty or non-string signature")
        return signature

    def __repr__(self) -> str:
        return f"WalletAdapterSigner(address={self._address})"
