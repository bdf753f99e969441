"""
Tests for settings and the immutable processor configuration.

Tests: ProcessorConfig.required_amount, Settings.processor_config,
rpc_url derivation, admin_signer, validate_production_settings
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import dataclasses

import pytest

from config import ProcessorConfig, Settings
from services.signing import Ed25519Signer
from tests.conftest import PACKAGE_ID, PROCESSOR_ID


def _settings(**overrides) -> Settings:
    values = {"package_id": PACKAGE_ID, "processor_object_id": PROCESSOR_ID, "private_key": ""}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestProcessorConfig:

    @pytest.mark.unit
    def test_required_amount_defaults_to_configured_price(self):
        config = ProcessorConfig(PACKAGE_ID, PROCESSOR_ID, payment_amount=50_000_000, admin_fee=10_000_000)
        assert config.required_amount() == 60_000_000
        assert config.required_amount(1_000) == 10_001_000
        assert config.required_amount(0) == 10_000_000

    @pytest.mark.unit
    def test_frozen(self):
        config = ProcessorConfig(PACKAGE_ID, PROCESSOR_ID)
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.admin_fee = 0


class TestSettings:

    @pytest.mark.unit
    def test_processor_config(self):
        config = _settings(admin_fee_mist=5, network="devnet").processor_config()
        assert config.package_id == PACKAGE_ID
        assert config.admin_fee == 5
        assert config.network == "devnet"

    @pytest.mark.unit
    def test_processor_config_requires_ids(self):
        with pytest.raises(ValueError, match="PACKAGE_ID, PROCESSOR_OBJECT_ID"):
            _settings(package_id="", processor_object_id="").processor_config()

    @pytest.mark.unit
    def test_rpc_url_from_network(self):
        assert _settings(network="mainnet", sui_rpc_url="").rpc_url == "https://fullnode.mainnet.sui.io:443"

    @pytest.mark.unit
    def test_rpc_url_override(self):
        assert _settings(sui_rpc_url="http://127.0.0.1:9000").rpc_url == "http://127.0.0.1:9000"

    @pytest.mark.unit
    def test_admin_signer(self):
        key = Ed25519Signer(bytes(32)).export_base64()
        settings = _settings(private_key=key)
        assert settings.admin_signer.address == Ed25519Signer(bytes(32)).address
        assert _settings().admin_signer is None

    @pytest.mark.unit
    def test_cors_origins_list(self):
        assert _settings(cors_origins="http://a, http://b,").cors_origins_list == ["http://a", "http://b"]

    @pytest.mark.unit
    def test_production_rejects_wildcard_cors(self):
        with pytest.raises(ValueError, match="CORS_ORIGINS"):
            _settings(environment="production", cors_origins="*").validate_production_settings()

    @pytest.mark.unit
    def test_rejects_malformed_object_id(self):
        with pytest.raises(ValueError, match="PROCESSOR_OBJECT_ID"):
            _settings(processor_object_id="processor").validate_production_settings()

    @pytest.mark.unit
    def test_rejects_negative_fee(self):
        with pytest.raises(ValueError):
            _settings(admin_fee_mist=-1).validate_production_settings()
