"""Quoting, slippage, gas estimation and trade execution."""

from .gas import DEFAULT_GAS_BUFFERS, GasEstimator, apply_gas_buffer, apply_gas_multiplier
from .quote import QuoteResolver
from .slippage import (
    actual_slippage,
    calculate_slippage,
    format_ether,
    format_units,
    max_amount_in,
    min_amount_out,
    parse_ether,
    parse_units,
    within_tolerance,
)
from .trade import TradeExecutor
from .types import (
    AvailableBuyTokens,
    BuyGasParams,
    BuyParams,
    CurveState,
    GasEstimationParams,
    OperationKind,
    PermitSignature,
    Quote,
    SellGasParams,
    SellParams,
    SellPermitGasParams,
    SellPermitParams,
)

__all__ = [
    "DEFAULT_GAS_BUFFERS",
    "GasEstimator",
    "apply_gas_buffer",
    "apply_gas_multiplier",
    "QuoteResolver",
    "TradeExecutor",
    "actual_slippage",
    "calculate_slippage",
    "format_ether",
    "format_units",
    "max_amount_in",
    "min_amount_out",
    "parse_ether",
    "parse_units",
    "within_tolerance",
    "AvailableBuyTokens",
    "BuyGasParams",
    "BuyParams",
    "CurveState",
    "GasEstimationParams",
    "OperationKind",
    "PermitSignature",
    "Quote",
    "SellGasParams",
    "SellParams",
    "SellPermitGasParams",
    "SellPermitParams",
]
