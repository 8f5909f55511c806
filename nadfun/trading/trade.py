"""
Trade execution against the bonding-curve and DEX routers.

Handles:
- Calldata building for buy / sell / sellPermit
- Submission through the chain client's signer
- Receipt waiting (a reverted receipt raises, nothing is retried)
- Pass-through quoting and gas estimation for composition
"""

import time
from typing import Dict, Optional, Union

from ..config import ChainConfig
from ..exceptions import InvalidArgumentError
from ..interfaces import ChainClient, SystemTimeProvider, TimeProvider
from ..utils import get_logger, to_checksum
from .gas import GasEstimator, buy_calldata, sell_calldata, sell_permit_calldata
from .quote import QuoteResolver
from .types import (
    AvailableBuyTokens,
    BuyParams,
    CurveState,
    GasEstimationParams,
    Quote,
    SellParams,
    SellPermitParams,
)

logger = get_logger(__name__)


class TradeExecutor:
    """
    Submits router trades and waits for their receipts.

    The router passed to each trade must be the one returned by the quote
    for that trade.
    """

    def __init__(
        self,
        config: ChainConfig,
        chain: ChainClient,
        time_provider: Optional[TimeProvider] = None,
    ):
        """
        Initialize executor.

        Args:
            config: Chain configuration
            chain: Chain client with a signer for submissions
            time_provider: Clock used for default deadlines
        """
        self.config = config
        self.chain = chain
        self.time_provider = time_provider or SystemTimeProvider()
        self.quotes = QuoteResolver(config, chain)
        self.gas = GasEstimator(chain)

        # Execution stats
        self.trades_submitted = 0
        self.trades_confirmed = 0
        self.trades_failed = 0

    def _default_deadline(self) -> int:
        return int(self.time_provider.current_timestamp()) + self.config.default_deadline_seconds

    # Quotes and state
    async def quote_out(self, token: str, amount_in: int, is_buy: bool) -> Quote:
        return await self.quotes.quote_out(token, amount_in, is_buy)

    async def quote_in(self, token: str, amount_out: int, is_buy: bool) -> Quote:
        return await self.quotes.quote_in(token, amount_out, is_buy)

    async def get_curve_state(self, token: str) -> CurveState:
        return await self.quotes.get_curve_state(token)

    async def is_listed(self, token: str) -> bool:
        return await self.quotes.is_listed(token)

    async def is_locked(self, token: str) -> bool:
        return await self.quotes.is_locked(token)

    async def get_available_buy_tokens(self, token: str) -> AvailableBuyTokens:
        return await self.quotes.get_available_buy_tokens(token)

    async def estimate_gas(self, router: str, params: GasEstimationParams) -> int:
        """Raw gas estimate for the exact trade; apply buffers on the result."""
        return await self.gas.estimate(router, params)

    # Trades
    async def buy(self, params: BuyParams, router: str, wait: bool = True) -> str:
        """
        Buy ``params.token`` with ``params.amount_in`` MON.

        Args:
            params: Buy parameters (deadline defaults to now + default_deadline_seconds)
            router: Router from the quote
            wait: Block until mined

        Returns:
            Transaction hash
        """
        deadline = params.deadline or self._default_deadline()
        data = buy_calldata(params.token, params.to, params.amount_out_min, deadline)
        tx = self._build_tx(router, data, params, value=params.amount_in)
        return await self._execute("buy", params.token, tx, wait)

    async def sell(self, params: SellParams, router: str, wait: bool = True) -> str:
        """Sell tokens; the router must already hold a sufficient allowance."""
        deadline = params.deadline or self._default_deadline()
        data = sell_calldata(
            params.token, params.to, params.amount_in, params.amount_out_min, deadline
        )
        tx = self._build_tx(router, data, params)
        return await self._execute("sell", params.token, tx, wait)

    async def sell_permit(
        self, params: SellPermitParams, router: str, wait: bool = True
    ) -> str:
        """Sell tokens authorized by a permit signature in the same transaction."""
        if not params.deadline:
            raise InvalidArgumentError(
                "sellPermit requires the deadline used for the permit signature"
            )
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
        tx = self._build_tx(router, data, params)
        return await self._execute("sellPermit", params.token, tx, wait)

    def _build_tx(
        self,
        router: str,
        data: str,
        params: Union[BuyParams, SellParams, SellPermitParams],
        value: int = 0,
    ) -> Dict:
        tx = {"to": to_checksum(router), "data": data, "value": value}
        if params.gas_limit is not None:
            tx["gas"] = params.gas_limit
        if params.gas_price is not None:
            tx["gasPrice"] = params.gas_price
        if params.nonce is not None:
            tx["nonce"] = params.nonce
        return tx

    async def _execute(self, operation: str, token: str, tx: Dict, wait: bool) -> str:
        start_time = time.time()
        logger.info(
            f"EXECUTION_START: {{'operation': '{operation}', 'token': '{token}', "
            f"'router': '{tx['to']}', 'value': {tx['value']}, 'gas': {tx.get('gas')}}}"
        )

        try:
            tx_hash = await self.chain.send_transaction(tx)
            self.trades_submitted += 1
            if wait:
                await self.chain.wait_for_receipt(tx_hash)
                self.trades_confirmed += 1
        except Exception as e:
            self.trades_failed += 1
            logger.error(
                f"EXECUTION_RESULT: {{'operation': '{operation}', 'success': False, "
                f"'error': '{e}'}}"
            )
            raise

        logger.info(
            f"EXECUTION_RESULT: {{'operation': '{operation}', 'success': True, "
            f"'tx_hash': '{tx_hash}', 'confirmed': {wait}, "
            f"'elapsed_ms': {(time.time() - start_time) * 1000:.0f}}}"
        )
        return tx_hash

    def get_stats(self) -> Dict:
        """Get execution statistics."""
        return {
            "trades_submitted": self.trades_submitted,
            "trades_confirmed": self.trades_confirmed,
            "trades_failed": self.trades_failed,
        }
