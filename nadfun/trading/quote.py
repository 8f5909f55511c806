"""
Quote resolution against the price lens, plus bonding-curve state reads.

Quotes are never cached: reserves move with every trade and a token can
graduate from the curve to the DEX between two calls, so every call goes to
the chain and the router it returns is the one the trade must use.
"""

from ..abis import BONDING_CURVE_ROUTER_ABI, CURVE_ABI, LENS_ABI
from ..config import ChainConfig
from ..interfaces import ChainClient
from ..utils import get_logger, to_checksum
from .types import AvailableBuyTokens, CurveState, Quote

logger = get_logger(__name__)


class QuoteResolver:
    """Reads quotes from the lens and curve state from the curve contract."""

    def __init__(self, config: ChainConfig, chain: ChainClient):
        self.config = config
        self.chain = chain

    async def quote_out(self, token: str, amount_in: int, is_buy: bool) -> Quote:
        """
        Expected output for an exact input.

        Args:
            token: Token being bought or sold
            amount_in: MON in for a buy, tokens in for a sell
            is_buy: Trade direction

        Returns:
            Quote with the router that must execute the trade
        """
        router, amount = await self.chain.call(
            self.config.contracts.lens,
            LENS_ABI,
            "getAmountOut",
            [to_checksum(token), amount_in, is_buy],
        )
        quote = Quote(router=to_checksum(router), amount=int(amount))
        logger.debug(f"Quote out {token} in={amount_in} buy={is_buy}: {quote}")
        return quote

    async def quote_in(self, token: str, amount_out: int, is_buy: bool) -> Quote:
        """Required input for an exact output."""
        router, amount = await self.chain.call(
            self.config.contracts.lens,
            LENS_ABI,
            "getAmountIn",
            [to_checksum(token), amount_out, is_buy],
        )
        quote = Quote(router=to_checksum(router), amount=int(amount))
        logger.debug(f"Quote in {token} out={amount_out} buy={is_buy}: {quote}")
        return quote

    async def get_curve_state(self, token: str) -> CurveState:
        values = await self.chain.call(
            self.config.contracts.curve, CURVE_ABI, "curves", [to_checksum(token)]
        )
        return CurveState.from_tuple(values)

    async def is_listed(self, token: str) -> bool:
        return bool(
            await self.chain.call(
                self.config.contracts.curve, CURVE_ABI, "isListed", [to_checksum(token)]
            )
        )

    async def is_locked(self, token: str) -> bool:
        return bool(
            await self.chain.call(
                self.config.contracts.curve, CURVE_ABI, "isLocked", [to_checksum(token)]
            )
        )

    async def get_available_buy_tokens(self, token: str) -> AvailableBuyTokens:
        available, required_mon = await self.chain.call(
            self.config.contracts.bonding_curve_router,
            BONDING_CURVE_ROUTER_ABI,
            "availableBuyTokens",
            [to_checksum(token)],
        )
        return AvailableBuyTokens(
            available_buy_token=int(available), required_mon_amount=int(required_mon)
        )
