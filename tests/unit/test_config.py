"""
Unit tests for configuration loading.

Tests cover:
- ChainConfig.from_dict validation
- YAML loading with environment overrides
- Reconnect backoff schedule
- The shipped example configuration
"""

from pathlib import Path

import pytest
import yaml

from nadfun.config import (
    DEFAULT_FEE_TIER,
    MONAD_TESTNET_CHAIN_ID,
    ChainConfig,
    ContractAddresses,
    ReconnectPolicy,
    load_config,
    load_yaml_config,
    monad_testnet_config,
)
from nadfun.exceptions import ConfigurationError

from conftest import CONTRACTS


def _config_dict(**overrides):
    data = {
        "chain_id": 10143,
        "rpc_url": "https://testnet-rpc.monad.xyz",
        "contracts": {k: v.lower() for k, v in CONTRACTS.items()},
    }
    data.update(overrides)
    return data


class TestChainConfig:
    def test_from_dict_defaults(self):
        config = ChainConfig.from_dict(_config_dict())
        assert config.chain_id == 10143
        assert config.fee_tier == DEFAULT_FEE_TIER == 10000
        assert config.default_deadline_seconds == 3600
        assert config.permit_version == "1"
        assert config.log_batch_size == 2000
        assert config.receipt_timeout is None
        assert config.reconnect == ReconnectPolicy()

    def test_addresses_are_checksummed(self):
        config = ChainConfig.from_dict(_config_dict())
        assert config.contracts.curve == CONTRACTS["curve"]

    def test_missing_rpc_url(self):
        data = _config_dict()
        del data["rpc_url"]
        with pytest.raises(ConfigurationError) as exc_info:
            ChainConfig.from_dict(data)
        assert exc_info.value.details["field"] == "rpc_url"

    def test_invalid_chain_id(self):
        with pytest.raises(ConfigurationError):
            ChainConfig.from_dict(_config_dict(chain_id="monad"))

    def test_missing_contract(self):
        data = _config_dict()
        del data["contracts"]["lens"]
        with pytest.raises(ConfigurationError) as exc_info:
            ChainConfig.from_dict(data)
        assert exc_info.value.details["field"] == "contracts.lens"

    def test_invalid_contract_address(self):
        data = _config_dict()
        data["contracts"]["wmon"] = "0x1234"
        with pytest.raises(ConfigurationError):
            ChainConfig.from_dict(data)

    def test_rejects_zero_batch_size(self):
        with pytest.raises(ConfigurationError):
            ChainConfig.from_dict(_config_dict(log_batch_size=0))

    def test_config_is_immutable(self):
        config = ChainConfig.from_dict(_config_dict())
        with pytest.raises(Exception):
            config.chain_id = 1

    def test_optional_treasury(self):
        data = _config_dict()
        data["contracts"]["creator_treasury"] = CONTRACTS["wmon"]
        contracts = ContractAddresses.from_dict(data["contracts"])
        assert contracts.creator_treasury == CONTRACTS["wmon"]

    def test_monad_testnet_helper(self):
        config = monad_testnet_config("http://rpc", CONTRACTS, poll_interval=0.5)
        assert config.chain_id == MONAD_TESTNET_CHAIN_ID
        assert config.poll_interval == 0.5


class TestReconnectPolicy:
    def test_exponential_schedule_capped(self):
        policy = ReconnectPolicy(initial_delay=1.0, max_delay=5.0, multiplier=2.0)
        assert [policy.delay_for(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


class TestLoadConfig:
    def test_load_yaml_with_env_override(self, tmp_path, monkeypatch):
        path = tmp_path / "nadfun.yaml"
        path.write_text(yaml.safe_dump(_config_dict()))
        monkeypatch.setenv("NADFUN_RPC_URL", "http://override:8545")
        monkeypatch.delenv("NADFUN_CHAIN_ID", raising=False)
        monkeypatch.delenv("NADFUN_WS_URL", raising=False)

        config = load_config(path)
        assert config.rpc_url == "http://override:8545"

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "nadfun.yaml"
        path.write_text(yaml.safe_dump(_config_dict()))
        monkeypatch.setenv("NADFUN_CONFIG", str(path))
        monkeypatch.delenv("NADFUN_RPC_URL", raising=False)
        monkeypatch.delenv("NADFUN_CHAIN_ID", raising=False)
        monkeypatch.delenv("NADFUN_WS_URL", raising=False)

        assert load_config().chain_id == 10143

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_yaml_config(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ConfigurationError):
            load_yaml_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("chain_id: [unclosed")
        with pytest.raises(ConfigurationError):
            load_yaml_config(path)

    def test_no_path_anywhere(self, monkeypatch):
        monkeypatch.delenv("NADFUN_CONFIG", raising=False)
        with pytest.raises(ConfigurationError):
            load_config()

    def test_example_config_loads(self, monkeypatch):
        for name in ("NADFUN_RPC_URL", "NADFUN_WS_URL", "NADFUN_CHAIN_ID"):
            monkeypatch.delenv(name, raising=False)

        config = load_config(Path(__file__).parents[2] / "examples" / "config.example.yaml")

        assert config.chain_id == 10143
        assert config.network == "monad-testnet"
        assert config.fee_tier == 10000
        assert config.log_batch_size == 100
        assert config.receipt_timeout == 120.0
        assert config.reconnect.max_attempts == 5
        assert config.contracts.wmon == "0x0000000000000000000000000000000000000005"
