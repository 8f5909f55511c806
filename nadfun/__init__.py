"""
nadfun trading SDK.

Bonding-curve and DEX trade execution for nad.fun launch tokens on Monad,
plus the event pipeline (historical indexers and live streams) and the
sniper / bundler bots built on top of it.
"""

PROJECT_NAME = "nadfun-trading"
from nadfun.version import __version__

VERSION = __version__

from nadfun.bots import (
    BundledOperation,
    BundledOperationResult,
    BundlerBot,
    BundlerConfig,
    BundleSummary,
    SniperBot,
    SniperConfig,
)
from nadfun.chain import Web3ChainClient
from nadfun.config import (
    ChainConfig,
    ContractAddresses,
    ReconnectPolicy,
    load_config,
    monad_testnet_config,
)
from nadfun.exceptions import (
    ConfigurationError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidArgumentError,
    NadfunError,
    NetworkError,
    RevertError,
    StaleQuoteError,
    UnsupportedOperationError,
    UserCancelledError,
)
from nadfun.interfaces import (
    ChainClient,
    DeterministicTimeProvider,
    Signer,
    SystemTimeProvider,
    TimeProvider,
)
from nadfun.stream import (
    CurveEventType,
    CurveIndexer,
    CurveStream,
    DexIndexer,
    DexStream,
    PoolDiscovery,
)
from nadfun.token import PermitSigner, TokenClient
from nadfun.trading import (
    BuyGasParams,
    BuyParams,
    GasEstimator,
    QuoteResolver,
    SellGasParams,
    SellParams,
    SellPermitGasParams,
    SellPermitParams,
    TradeExecutor,
    calculate_slippage,
    max_amount_in,
    min_amount_out,
)
from nadfun.wallet import Wallet

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "BundledOperation",
    "BundledOperationResult",
    "BundlerBot",
    "BundlerConfig",
    "BundleSummary",
    "SniperBot",
    "SniperConfig",
    "Web3ChainClient",
    "ChainConfig",
    "ContractAddresses",
    "ReconnectPolicy",
    "load_config",
    "monad_testnet_config",
    "ConfigurationError",
    "InsufficientAllowanceError",
    "InsufficientBalanceError",
    "InvalidArgumentError",
    "NadfunError",
    "NetworkError",
    "RevertError",
    "StaleQuoteError",
    "UnsupportedOperationError",
    "UserCancelledError",
    "ChainClient",
    "DeterministicTimeProvider",
    "Signer",
    "SystemTimeProvider",
    "TimeProvider",
    "CurveEventType",
    "CurveIndexer",
    "CurveStream",
    "DexIndexer",
    "DexStream",
    "PoolDiscovery",
    "PermitSigner",
    "TokenClient",
    "BuyGasParams",
    "BuyParams",
    "GasEstimator",
    "QuoteResolver",
    "SellGasParams",
    "SellParams",
    "SellPermitGasParams",
    "SellPermitParams",
    "TradeExecutor",
    "calculate_slippage",
    "max_amount_in",
    "min_amount_out",
    "Wallet",
]
