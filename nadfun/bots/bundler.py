"""
Bundler bot: runs a list of buy / sell / sellPermit operations in order.

Operations execute strictly one after another from a single wallet. A failed
operation is recorded and the bundle moves on to the next one.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..config import ChainConfig
from ..exceptions import InsufficientBalanceError, InvalidArgumentError
from ..interfaces import ChainClient, Signer, SystemTimeProvider, TimeProvider
from ..token.token import TokenClient
from ..trading.gas import DEFAULT_GAS_BUFFERS, apply_gas_buffer, apply_gas_multiplier
from ..trading.slippage import format_ether, min_amount_out
from ..trading.trade import TradeExecutor
from ..trading.types import (
    BuyGasParams,
    BuyParams,
    OperationKind,
    SellGasParams,
    SellParams,
    SellPermitGasParams,
    SellPermitParams,
)
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BundledOperation:
    """One step of a bundle; ``type`` is "buy", "sell" or "sellPermit"."""

    type: str
    token: str
    amount_in: int
    slippage_percent: Optional[float] = None


@dataclass
class BundlerConfig:
    default_slippage_percent: float = 5.0
    gas_multiplier: float = 1.0
    max_gas_price: Optional[int] = None
    wait_for_confirmation: bool = True
    deadline_seconds: int = 300


@dataclass
class BundledOperationResult:
    operation: BundledOperation
    success: bool
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    expected_amount: Optional[int] = None


@dataclass(frozen=True)
class BundleSummary:
    total: int
    successful: int
    failed: int


_OPERATION_KINDS = {
    "buy": OperationKind.BUY,
    "sell": OperationKind.SELL,
    "sellPermit": OperationKind.SELL_PERMIT,
}


class BundlerBot:
    """Executes bundled trade operations sequentially."""

    def __init__(
        self,
        config: ChainConfig,
        chain: ChainClient,
        signer: Signer,
        bundler_config: Optional[BundlerConfig] = None,
        time_provider: Optional[TimeProvider] = None,
    ):
        self.config = config
        self.chain = chain
        self.signer = signer
        self.bundler_config = bundler_config or BundlerConfig()
        self.time_provider = time_provider or SystemTimeProvider()
        self.trade = TradeExecutor(config, chain, self.time_provider)
        self.token = TokenClient(config, chain, signer)

    def get_address(self) -> str:
        return self.signer.address

    async def execute(self, operations: List[BundledOperation]) -> List[BundledOperationResult]:
        """
        Run ``operations`` in order.

        With ``wait_for_confirmation`` each trade's receipt is awaited before
        the next operation starts.

        Returns:
            One result per operation, in input order
        """
        logger.info(f"📦 Executing bundle of {len(operations)} operations")
        results = []

        for index, operation in enumerate(operations, start=1):
            logger.info(
                f"[{index}/{len(operations)}] {operation.type} {operation.token} "
                f"amount={operation.amount_in}"
            )
            result = await self._execute_operation(operation)
            if result.success:
                logger.info(f"✅ {operation.type} succeeded: {result.tx_hash}")
            else:
                logger.error(f"❌ {operation.type} failed: {result.error}")
            results.append(result)

        summary = self.summarize(results)
        logger.info(
            f"📊 Bundle complete: {summary.successful}/{summary.total} successful, "
            f"{summary.failed} failed"
        )
        return results

    @staticmethod
    def summarize(results: List[BundledOperationResult]) -> BundleSummary:
        successful = sum(1 for r in results if r.success)
        return BundleSummary(
            total=len(results), successful=successful, failed=len(results) - successful
        )

    async def _execute_operation(self, operation: BundledOperation) -> BundledOperationResult:
        try:
            kind = _OPERATION_KINDS.get(operation.type)
            if kind is None:
                raise InvalidArgumentError(
                    f"Unknown operation type: {operation.type}", {"type": operation.type}
                )
            if operation.amount_in <= 0:
                raise InvalidArgumentError(
                    "Operation amount must be positive", {"amount_in": operation.amount_in}
                )

            if kind == OperationKind.BUY:
                tx_hash, expected = await self._buy(operation)
            elif kind == OperationKind.SELL:
                tx_hash, expected = await self._sell(operation)
            else:
                tx_hash, expected = await self._sell_permit(operation)
        except Exception as e:
            return BundledOperationResult(operation=operation, success=False, error=str(e))

        return BundledOperationResult(
            operation=operation, success=True, tx_hash=tx_hash, expected_amount=expected
        )

    def _slippage(self, operation: BundledOperation) -> float:
        if operation.slippage_percent is not None:
            return operation.slippage_percent
        return self.bundler_config.default_slippage_percent

    def _deadline(self) -> int:
        return int(self.time_provider.current_timestamp()) + self.bundler_config.deadline_seconds

    async def _gas_price(self) -> int:
        return apply_gas_multiplier(
            await self.chain.get_gas_price(),
            self.bundler_config.gas_multiplier,
            self.bundler_config.max_gas_price,
        )

    async def _check_token_balance(self, operation: BundledOperation) -> None:
        balance = await self.token.get_balance(operation.token)
        if balance < operation.amount_in:
            raise InsufficientBalanceError(
                f"Insufficient token balance: {balance} < {operation.amount_in}",
                required=operation.amount_in,
                available=balance,
            )

    async def _buy(self, operation: BundledOperation):
        wallet = self.get_address()
        balance = await self.chain.get_balance(wallet)
        if balance < operation.amount_in:
            raise InsufficientBalanceError(
                f"Insufficient MON balance: {format_ether(balance)} < "
                f"{format_ether(operation.amount_in)}",
                required=operation.amount_in,
                available=balance,
            )

        quote = await self.trade.quote_out(operation.token, operation.amount_in, is_buy=True)
        amount_out_min = min_amount_out(quote.amount, self._slippage(operation))
        gas_price = await self._gas_price()
        deadline = self._deadline()

        estimate = await self.trade.estimate_gas(
            quote.router,
            BuyGasParams(
                token=operation.token,
                to=wallet,
                amount_in=operation.amount_in,
                amount_out_min=amount_out_min,
                deadline=deadline,
            ),
        )
        tx_hash = await self.trade.buy(
            BuyParams(
                token=operation.token,
                to=wallet,
                amount_in=operation.amount_in,
                amount_out_min=amount_out_min,
                deadline=deadline,
                gas_limit=apply_gas_buffer(estimate, DEFAULT_GAS_BUFFERS[OperationKind.BUY]),
                gas_price=gas_price,
            ),
            quote.router,
            wait=self.bundler_config.wait_for_confirmation,
        )
        return tx_hash, quote.amount

    async def _sell(self, operation: BundledOperation):
        wallet = self.get_address()
        await self._check_token_balance(operation)

        # Router for this token, resolved from a minimal quote
        router = (await self.trade.quote_out(operation.token, 1, is_buy=False)).router
        approval = await self.token.ensure_allowance(operation.token, router, operation.amount_in)
        if approval:
            logger.info(f"🔓 Approved router {router}: {approval}")

        quote = await self.trade.quote_out(operation.token, operation.amount_in, is_buy=False)
        amount_out_min = min_amount_out(quote.amount, self._slippage(operation))
        gas_price = await self._gas_price()
        deadline = self._deadline()

        estimate = await self.trade.estimate_gas(
            quote.router,
            SellGasParams(
                token=operation.token,
                to=wallet,
                amount_in=operation.amount_in,
                amount_out_min=amount_out_min,
                deadline=deadline,
            ),
        )
        tx_hash = await self.trade.sell(
            SellParams(
                token=operation.token,
                to=wallet,
                amount_in=operation.amount_in,
                amount_out_min=amount_out_min,
                deadline=deadline,
                gas_limit=apply_gas_buffer(estimate, DEFAULT_GAS_BUFFERS[OperationKind.SELL]),
                gas_price=gas_price,
            ),
            quote.router,
            wait=self.bundler_config.wait_for_confirmation,
        )
        return tx_hash, quote.amount

    async def _sell_permit(self, operation: BundledOperation):
        wallet = self.get_address()
        await self._check_token_balance(operation)

        quote = await self.trade.quote_out(operation.token, operation.amount_in, is_buy=False)
        amount_out_min = min_amount_out(quote.amount, self._slippage(operation))
        deadline = self._deadline()

        permit = await self.token.generate_permit_signature(
            operation.token, quote.router, operation.amount_in, deadline
        )
        gas_price = await self._gas_price()

        estimate = await self.trade.estimate_gas(
            quote.router,
            SellPermitGasParams(
                token=operation.token,
                to=wallet,
                amount_in=operation.amount_in,
                amount_out_min=amount_out_min,
                amount_allowance=operation.amount_in,
                deadline=deadline,
                v=permit.v,
                r=permit.r,
                s=permit.s,
            ),
        )
        tx_hash = await self.trade.sell_permit(
            SellPermitParams(
                token=operation.token,
                to=wallet,
                amount_in=operation.amount_in,
                amount_out_min=amount_out_min,
                amount_allowance=operation.amount_in,
                v=permit.v,
                r=permit.r,
                s=permit.s,
                deadline=deadline,
                gas_limit=apply_gas_buffer(
                    estimate, DEFAULT_GAS_BUFFERS[OperationKind.SELL_PERMIT]
                ),
                gas_price=gas_price,
            ),
            quote.router,
            wait=self.bundler_config.wait_for_confirmation,
        )
        return tx_hash, quote.amount
