"""
Gas estimation for router trades.

Each operation kind builds the exact calldata the trade will send and asks the
node to estimate it; no flat defaults are substituted. Safety buffers are the
caller's decision and are applied with :func:`apply_gas_buffer`.
"""

import math
from typing import Dict, Optional, Union

from web3 import Web3

from ..abis import ROUTER_ABI, encode_call
from ..exceptions import InvalidArgumentError
from ..interfaces import ChainClient
from ..utils import get_logger, to_checksum
from .types import (
    BuyGasParams,
    GasEstimationParams,
    OperationKind,
    SellGasParams,
    SellPermitGasParams,
)

logger = get_logger(__name__)

# Recommended buffers (percent) on top of the raw estimate
DEFAULT_GAS_BUFFERS: Dict[OperationKind, int] = {
    OperationKind.BUY: 20,
    OperationKind.SELL: 15,
    OperationKind.SELL_PERMIT: 25,
}


def apply_gas_buffer(estimate: int, buffer_percent: int) -> int:
    """Raw estimate plus ``buffer_percent``, in integer gas units."""
    if buffer_percent < 0:
        raise InvalidArgumentError(
            "Gas buffer percent must be >= 0", {"buffer_percent": buffer_percent}
        )
    return estimate * (100 + buffer_percent) // 100


def apply_gas_multiplier(
    gas_price: int, multiplier: float, max_gas_price: Optional[int] = None
) -> int:
    """
    Scale a gas price by ``multiplier`` (applied only above 1.0, to 2 decimals)
    and cap it at ``max_gas_price`` when given.
    """
    if multiplier and multiplier > 1:
        gas_price = gas_price * math.floor(multiplier * 100) // 100
    if max_gas_price is not None and gas_price > max_gas_price:
        logger.info(f"⚠️ Gas price capped at {max_gas_price / 1e9:.2f} gwei")
        gas_price = max_gas_price
    return gas_price


def to_bytes32(value: Union[bytes, str]) -> bytes:
    """Signature component as exactly 32 bytes."""
    if isinstance(value, str):
        value = Web3.to_bytes(hexstr=value)
    value = bytes(value)
    if len(value) > 32:
        raise InvalidArgumentError(f"Expected 32 bytes, got {len(value)}")
    return value.rjust(32, b"\x00")


# Calldata builders shared with the trade executor
def buy_calldata(token: str, to: str, amount_out_min: int, deadline: int) -> str:
    return encode_call(
        ROUTER_ABI,
        "buy",
        [(amount_out_min, to_checksum(token), to_checksum(to), deadline)],
    )


def sell_calldata(
    token: str, to: str, amount_in: int, amount_out_min: int, deadline: int
) -> str:
    return encode_call(
        ROUTER_ABI,
        "sell",
        [(amount_in, amount_out_min, to_checksum(token), to_checksum(to), deadline)],
    )


def sell_permit_calldata(
    token: str,
    to: str,
    amount_in: int,
    amount_out_min: int,
    amount_allowance: int,
    deadline: int,
    v: int,
    r: Union[bytes, str],
    s: Union[bytes, str],
) -> str:
    return encode_call(
        ROUTER_ABI,
        "sellPermit",
        [
            (
                amount_in,
                amount_out_min,
                amount_allowance,
                to_checksum(token),
                to_checksum(to),
                deadline,
                v,
                to_bytes32(r),
                to_bytes32(s),
            )
        ],
    )


class GasEstimator:
    """Network gas estimates for buy, sell and sellPermit calldata."""

    def __init__(self, chain: ChainClient):
        self.chain = chain

    async def estimate(self, router: str, params: GasEstimationParams) -> int:
        """
        Estimate gas for one router operation.

        Args:
            router: Router address returned by the quote
            params: One of BuyGasParams, SellGasParams, SellPermitGasParams

        Returns:
            Raw gas estimate (no buffer)

        Raises:
            InvalidArgumentError: For an unknown params type
            RevertError: When the simulated call reverts (e.g. missing allowance)
        """
        if isinstance(params, BuyGasParams):
            return await self.estimate_buy_gas(router, params)
        if isinstance(params, SellGasParams):
            return await self.estimate_sell_gas(router, params)
        if isinstance(params, SellPermitGasParams):
            return await self.estimate_sell_permit_gas(router, params)
        raise InvalidArgumentError(
            f"Unsupported gas estimation params: {type(params).__name__}"
        )

    async def estimate_buy_gas(self, router: str, params: BuyGasParams) -> int:
        data = buy_calldata(params.token, params.to, params.amount_out_min, params.deadline)
        return await self._estimate(
            OperationKind.BUY,
            {
                "from": to_checksum(params.to),
                "to": to_checksum(router),
                "data": data,
                "value": params.amount_in,
            },
        )

    async def estimate_sell_gas(self, router: str, params: SellGasParams) -> int:
        data = sell_calldata(
            params.token, params.to, params.amount_in, params.amount_out_min, params.deadline
        )
        return await self._estimate(
            OperationKind.SELL,
            {"from": to_checksum(params.to), "to": to_checksum(router), "data": data},
        )

    async def estimate_sell_permit_gas(
        self, router: str, params: SellPermitGasParams
    ) -> int:
        data = sell_permit_calldata(
            params.token,
            params.to,
            params.amount_in,
            params.amount_out_min,
            params.amount_allowance,
            params.deadline,
            params.v,
            params.r,
            params.s,
        )
        return await self._estimate(
            OperationKind.SELL_PERMIT,
            {"from": to_checksum(params.to), "to": to_checksum(router), "data": data},
        )

    async def _estimate(self, kind: OperationKind, tx: dict) -> int:
        gas = await self.chain.estimate_gas(tx)
        logger.info(f"⛽ {kind.value} gas estimate: {gas:,} units")
        return int(gas)
