"""
Configuration management for the SuiFlow payment backend.

Loads settings from .env via pydantic-settings. Settings are read once at
startup; services receive the frozen ProcessorConfig built from them and never
consult the environment themselves.
"""
import logging
import re
from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.constants import SUI_COIN_TYPE
from sui_client import rpc_url_for_network

logger = logging.getLogger(__name__)

_OBJECT_ID_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


@dataclass(frozen=True)
class ProcessorConfig:
    """Immutable processor configuration shared by all concurrent callers."""

    package_id: str
    processor_object_id: str
    network: str = "testnet"
    coin_type: str = SUI_COIN_TYPE
    payment_amount: int = 50_000_000   # default product price, MIST
    admin_fee: int = 10_000_000        # fixed admin fee added to every payment, MIST
    gas_budget: int = 10_000_000

    def required_amount(self, price: Optional[int] = None) -> int:
        """Minimum coin balance needed to pay ``price`` plus the admin fee."""
        return (self.payment_amount if price is None else price) + self.admin_fee


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Sui network ─────────────────────────────────────────────────
    network: str = "testnet"
    sui_rpc_url: str = ""          # overrides the public URL derived from NETWORK
    rpc_timeout_seconds: float = 30.0

    # ── Contract ────────────────────────────────────────────────────
    package_id: str = ""
    processor_object_id: str = ""
    coin_type: str = SUI_COIN_TYPE

    # ── Operator / admin key (base64 Ed25519) ───────────────────────
    private_key: str = ""

    # ── Payments ────────────────────────────────────────────────────
    payment_amount_mist: int = 50_000_000   # 0.05 SUI
    admin_fee_mist: int = 10_000_000        # 0.01 SUI
    gas_budget_mist: int = 10_000_000
    submission_timeout_seconds: float = 60.0
    payment_rate_limit: int = 10
    payment_rate_window_seconds: int = 60

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    port: int = 3000

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def rpc_url(self) -> str:
        return self.sui_rpc_url or rpc_url_for_network(self.network)

    @cached_property
    def admin_signer(self):
        """
        Operator signing identity derived from PRIVATE_KEY (computed once, cached).

        Returns None when no key is configured; admin operations are then refused.
        """
        if not self.private_key:
            return None
        from services.signing import Ed25519Signer
        signer = Ed25519Signer.from_base64(self.private_key)
        logger.info(f"Operator account: {signer.address}")
        return signer

    def processor_config(self) -> ProcessorConfig:
        """Build the immutable processor configuration; PACKAGE_ID and PROCESSOR_OBJECT_ID are required."""
        missing = [
            name for name, value in (
                ("PACKAGE_ID", self.package_id),
                ("PROCESSOR_OBJECT_ID", self.processor_object_id),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"{', '.join(missing)} not set in .env")

        return ProcessorConfig(
            package_id=self.package_id,
            processor_object_id=self.processor_object_id,
            network=self.network,
            coin_type=self.coin_type,
            payment_amount=self.payment_amount_mist,
            admin_fee=self.admin_fee_mist,
            gas_budget=self.gas_budget_mist,
        )

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup.
        """
        for name, value in (
            ("PACKAGE_ID", self.package_id),
            ("PROCESSOR_OBJECT_ID", self.processor_object_id),
        ):
            if value and not _OBJECT_ID_RE.match(value):
                raise ValueError(f"{name} must be a 0x-prefixed hex object ID, got {value!r}")

        if self.payment_amount_mist < 0 or self.admin_fee_mist < 0:
            raise ValueError("PAYMENT_AMOUNT_MIST and ADMIN_FEE_MIST must be non-negative")

        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if self.sui_rpc_url.startswith("http://") and self.network != "localnet":
                raise ValueError("SUI_RPC_URL must use https in production.")
            logger.info("✅ Production settings validated")
        else:
            warnings = []
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            if not self.private_key:
                warnings.append("PRIVATE_KEY not set (admin fee withdrawal disabled)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()
