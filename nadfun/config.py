"""
Configuration loading and validation for the nadfun SDK.

Chain id, RPC endpoints and protocol contract addresses are carried in one
immutable ``ChainConfig`` that every component receives at construction, so
several chains or environments can be used side by side in one process.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv
from web3 import Web3

from .exceptions import ConfigurationError

MONAD_TESTNET_CHAIN_ID = 10143

# Fee tier of the canonical token/WMON pool created at graduation (1%)
DEFAULT_FEE_TIER = 10000
DEFAULT_DEADLINE_SECONDS = 3600
DEFAULT_LOG_BATCH_SIZE = 2000

_CONTRACT_FIELDS = (
    "bonding_curve_router",
    "dex_router",
    "lens",
    "curve",
    "wmon",
    "v3_factory",
)


@dataclass(frozen=True)
class ContractAddresses:
    """Checksummed addresses of the fixed protocol contracts."""

    bonding_curve_router: str
    dex_router: str
    lens: str
    curve: str
    wmon: str
    v3_factory: str
    creator_treasury: Optional[str] = None

    @classmethod
    def from_dict(cls, contracts: Dict[str, Any]) -> "ContractAddresses":
        """Parse and checksum contract addresses."""
        if not isinstance(contracts, dict):
            raise ConfigurationError("'contracts' must be a mapping")

        parsed = {}
        for name in _CONTRACT_FIELDS:
            if not contracts.get(name):
                raise ConfigurationError(
                    f"Missing contract address: {name}", {"field": f"contracts.{name}"}
                )
            parsed[name] = _checksum(contracts[name], f"contracts.{name}")

        treasury = contracts.get("creator_treasury")
        if treasury:
            parsed["creator_treasury"] = _checksum(treasury, "contracts.creator_treasury")

        return cls(**parsed)


@dataclass(frozen=True)
class ReconnectPolicy:
    """Exponential backoff for dropped live log subscriptions."""

    max_attempts: int = 5
    initial_delay: float = 1.0
    max_delay: float = 30.0
    multiplier: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Backoff before reconnect ``attempt`` (1-based)."""
        delay = self.initial_delay * (self.multiplier ** max(attempt - 1, 0))
        return min(delay, self.max_delay)


@dataclass(frozen=True)
class ChainConfig:
    """Immutable runtime configuration shared by all SDK components."""

    chain_id: int
    rpc_url: str
    contracts: ContractAddresses
    network: str = "monad-testnet"
    ws_url: Optional[str] = None

    # Protocol constants
    fee_tier: int = DEFAULT_FEE_TIER
    permit_version: str = "1"

    # Trading defaults
    default_deadline_seconds: int = DEFAULT_DEADLINE_SECONDS
    receipt_timeout: Optional[float] = None

    # Event pipeline
    log_batch_size: int = DEFAULT_LOG_BATCH_SIZE
    poll_interval: float = 1.0
    reconnect: ReconnectPolicy = field(default_factory=ReconnectPolicy)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ChainConfig":
        """Create config from dictionary."""
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        chain_id = config_dict.get("chain_id")
        if chain_id is None:
            raise ConfigurationError(
                "Missing required config field: chain_id", {"field": "chain_id"}
            )
        try:
            chain_id = int(chain_id)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"chain_id must be an integer, got {chain_id!r}", {"field": "chain_id"}
            )

        rpc_url = config_dict.get("rpc_url")
        if not rpc_url or not isinstance(rpc_url, str):
            raise ConfigurationError(
                "Missing required config field: rpc_url", {"field": "rpc_url"}
            )

        contracts = ContractAddresses.from_dict(config_dict.get("contracts", {}))

        reconnect_raw = config_dict.get("reconnect", {}) or {}
        reconnect = ReconnectPolicy(
            max_attempts=int(reconnect_raw.get("max_attempts", 5)),
            initial_delay=float(reconnect_raw.get("initial_delay", 1.0)),
            max_delay=float(reconnect_raw.get("max_delay", 30.0)),
            multiplier=float(reconnect_raw.get("multiplier", 2.0)),
        )

        log_batch_size = int(config_dict.get("log_batch_size", DEFAULT_LOG_BATCH_SIZE))
        if log_batch_size < 1:
            raise ConfigurationError(
                "log_batch_size must be >= 1", {"field": "log_batch_size"}
            )

        receipt_timeout = config_dict.get("receipt_timeout")

        return cls(
            chain_id=chain_id,
            rpc_url=rpc_url,
            contracts=contracts,
            network=config_dict.get("network", "monad-testnet"),
            ws_url=config_dict.get("ws_url"),
            fee_tier=int(config_dict.get("fee_tier", DEFAULT_FEE_TIER)),
            permit_version=str(config_dict.get("permit_version", "1")),
            default_deadline_seconds=int(
                config_dict.get("default_deadline_seconds", DEFAULT_DEADLINE_SECONDS)
            ),
            receipt_timeout=float(receipt_timeout) if receipt_timeout else None,
            log_batch_size=log_batch_size,
            poll_interval=float(config_dict.get("poll_interval", 1.0)),
            reconnect=reconnect,
        )


def _checksum(address: Any, field_name: str) -> str:
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ConfigurationError(
            f"Invalid address for {field_name}: {address!r}", {"field": field_name}
        )
    return Web3.to_checksum_address(address)


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse YAML configuration file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}")

    if config_dict is None:
        raise ConfigurationError(f"Empty configuration file: {config_path}")

    return config_dict


def load_config(
    config_path: Optional[Union[str, Path]] = None, env_prefix: str = "NADFUN_"
) -> ChainConfig:
    """
    Load configuration from YAML with environment overrides.

    Environment variables (after loading a ``.env`` file if present):
        {prefix}CONFIG: path to the YAML file when ``config_path`` is None
        {prefix}RPC_URL, {prefix}WS_URL, {prefix}CHAIN_ID: override the file

    Args:
        config_path: YAML file path
        env_prefix: Prefix for environment overrides

    Returns:
        Validated ChainConfig
    """
    load_dotenv()

    path = config_path or os.getenv(f"{env_prefix}CONFIG")
    if not path:
        raise ConfigurationError(
            f"No configuration path given and {env_prefix}CONFIG is not set"
        )

    config_dict = load_yaml_config(path)

    overrides = {
        "rpc_url": os.getenv(f"{env_prefix}RPC_URL"),
        "ws_url": os.getenv(f"{env_prefix}WS_URL"),
        "chain_id": os.getenv(f"{env_prefix}CHAIN_ID"),
    }
    for key, value in overrides.items():
        if value:
            config_dict[key] = value

    return ChainConfig.from_dict(config_dict)


def monad_testnet_config(
    rpc_url: str, contracts: Dict[str, Any], ws_url: Optional[str] = None, **kwargs
) -> ChainConfig:
    """Config for the default Monad testnet deployment."""
    config = ChainConfig.from_dict(
        {
            "network": "monad-testnet",
            "chain_id": MONAD_TESTNET_CHAIN_ID,
            "rpc_url": rpc_url,
            "ws_url": ws_url,
            "contracts": contracts,
        }
    )
    return replace(config, **kwargs) if kwargs else config
