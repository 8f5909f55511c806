"""
Sniper bot: buys newly created bonding-curve tokens as they launch.

Listens for CurveCreate events and, for each token that passes the rate
limit and token filters, runs a full buy: balance check, quote, slippage
bound, gas pricing, gas estimate and submission.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..config import ChainConfig
from ..exceptions import InsufficientBalanceError
from ..interfaces import ChainClient, Signer, SystemTimeProvider, TimeProvider
from ..stream.curve import CurveStream
from ..stream.types import CreateEvent, CurveEventType, StreamState
from ..trading.gas import apply_gas_buffer, apply_gas_multiplier
from ..trading.slippage import format_ether, min_amount_out
from ..trading.trade import TradeExecutor
from ..trading.types import BuyGasParams, BuyParams
from ..utils import address_set, get_logger

logger = get_logger(__name__)

TokenPredicate = Callable[[CreateEvent], Union[bool, Awaitable[bool]]]
BuySuccessCallback = Callable[[CreateEvent, str], Any]
BuyErrorCallback = Callable[[CreateEvent, Exception], Any]


@dataclass
class SniperConfig:
    """Sniper settings. Amounts and gas prices are in wei."""

    buy_amount: int
    slippage_percent: float
    gas_multiplier: float = 1.2
    max_gas_price: Optional[int] = None
    min_buy_interval: int = 1000  # ms
    token_whitelist: List[str] = field(default_factory=list)
    token_blacklist: List[str] = field(default_factory=list)
    token_filter: Optional[TokenPredicate] = None
    auto_buy: bool = True
    deadline_seconds: int = 300
    gas_buffer_percent: int = 20


class SniperBot:
    """Automatically buys tokens announced by CurveCreate events."""

    def __init__(
        self,
        config: ChainConfig,
        chain: ChainClient,
        signer: Signer,
        sniper_config: SniperConfig,
        stream: Optional[CurveStream] = None,
        time_provider: Optional[TimeProvider] = None,
    ):
        self.config = config
        self.chain = chain
        self.signer = signer
        self.sniper_config = sniper_config
        self.time_provider = time_provider or SystemTimeProvider()
        self.stream = stream or CurveStream(config, chain)
        self.trade = TradeExecutor(config, chain, self.time_provider)

        self.whitelist = address_set(sniper_config.token_whitelist)
        self.blacklist = address_set(sniper_config.token_blacklist)

        self.state = StreamState.IDLE
        self.last_buy_time = 0

        self._success_callbacks: List[BuySuccessCallback] = []
        self._error_callbacks: List[BuyErrorCallback] = []

        self.stats = {
            "total_events": 0,
            "total_buys": 0,
            "successful_buys": 0,
            "failed_buys": 0,
            "skipped_buys": 0,
        }

    async def start(self) -> None:
        if self.state == StreamState.RUNNING:
            logger.warning("⚠️ Sniper bot already running")
            return

        logger.info("🚀 Starting sniper bot")
        logger.info(f"   Wallet: {self.signer.address}")
        logger.info(f"   Buy amount: {format_ether(self.sniper_config.buy_amount)} MON")
        logger.info(f"   Slippage: {self.sniper_config.slippage_percent}%")
        logger.info(f"   Auto-buy: {self.sniper_config.auto_buy}")

        self.stream.subscribe_events([CurveEventType.CREATE])
        self.stream.on_event(self.handle_create_event)
        await self.stream.start()
        self.state = StreamState.RUNNING

    def stop(self) -> None:
        if self.state != StreamState.RUNNING:
            return
        self.stream.stop()
        self.state = StreamState.IDLE

        logger.info("🛑 Sniper bot stopped")
        logger.info(
            f"📊 Final stats: events={self.stats['total_events']} "
            f"buys={self.stats['total_buys']} "
            f"successful={self.stats['successful_buys']} "
            f"failed={self.stats['failed_buys']} "
            f"skipped={self.stats['skipped_buys']}"
        )

    def is_active(self) -> bool:
        return self.state == StreamState.RUNNING

    def on_buy_success(self, callback: BuySuccessCallback) -> None:
        self._success_callbacks.append(callback)

    def on_buy_error(self, callback: BuyErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)

    async def handle_create_event(self, event: Any) -> None:
        """Stream listener; never raises for trade failures."""
        if not isinstance(event, CreateEvent):
            return

        self.stats["total_events"] += 1
        logger.info(f"🆕 New token: {event.name} ({event.symbol}) {event.token}")

        reason = await self._skip_reason(event)
        if reason:
            self.stats["skipped_buys"] += 1
            logger.info(f"⏭️ Skipping {event.token}: {reason}")
            return

        if not self.sniper_config.auto_buy:
            logger.info(f"👀 Auto-buy disabled, not buying {event.token}")
            return

        await self.execute_buy(event)

    async def _skip_reason(self, event: CreateEvent) -> Optional[str]:
        now = self.time_provider.current_time_ms()
        if now - self.last_buy_time < self.sniper_config.min_buy_interval:
            return "rate limited"

        token = event.token.lower()
        if self.whitelist and token not in self.whitelist:
            return "not whitelisted"
        if self.blacklist and token in self.blacklist:
            return "blacklisted"

        predicate = self.sniper_config.token_filter
        if predicate is not None:
            try:
                accepted = predicate(event)
                if inspect.isawaitable(accepted):
                    accepted = await accepted
            except Exception as e:
                logger.warning(f"Token filter raised for {event.token}: {e}")
                return "token filter error"
            if not accepted:
                return "rejected by token filter"

        return None

    async def execute_buy(self, event: CreateEvent) -> Optional[str]:
        """
        Buy ``event.token`` with the configured amount.

        Returns:
            Transaction hash, or None when the buy failed
        """
        cfg = self.sniper_config
        self.stats["total_buys"] += 1
        self.last_buy_time = self.time_provider.current_time_ms()

        try:
            wallet = self.signer.address
            balance = await self.chain.get_balance(wallet)
            if balance < cfg.buy_amount:
                raise InsufficientBalanceError(
                    f"Insufficient MON balance: {format_ether(balance)} < "
                    f"{format_ether(cfg.buy_amount)}",
                    required=cfg.buy_amount,
                    available=balance,
                )

            quote = await self.trade.quote_out(event.token, cfg.buy_amount, is_buy=True)
            amount_out_min = min_amount_out(quote.amount, cfg.slippage_percent)

            gas_price = apply_gas_multiplier(
                await self.chain.get_gas_price(), cfg.gas_multiplier, cfg.max_gas_price
            )

            deadline = int(self.time_provider.current_timestamp()) + cfg.deadline_seconds
            estimate = await self.trade.estimate_gas(
                quote.router,
                BuyGasParams(
                    token=event.token,
                    to=wallet,
                    amount_in=cfg.buy_amount,
                    amount_out_min=amount_out_min,
                    deadline=deadline,
                ),
            )
            gas_limit = apply_gas_buffer(estimate, cfg.gas_buffer_percent)

            logger.info(
                f"💰 Buying {event.symbol}: {format_ether(cfg.buy_amount)} MON, "
                f"min out {amount_out_min}, gas {gas_limit:,} @ {gas_price / 1e9:.2f} gwei"
            )
            tx_hash = await self.trade.buy(
                BuyParams(
                    token=event.token,
                    to=wallet,
                    amount_in=cfg.buy_amount,
                    amount_out_min=amount_out_min,
                    deadline=deadline,
                    gas_limit=gas_limit,
                    gas_price=gas_price,
                ),
                quote.router,
            )
        except Exception as e:
            self.stats["failed_buys"] += 1
            logger.error(f"❌ Buy failed for {event.token}: {e}")
            await self._run_callbacks(self._error_callbacks, event, e)
            return None

        self.stats["successful_buys"] += 1
        logger.info(f"✅ Bought {event.symbol}: {tx_hash}")
        await self._run_callbacks(self._success_callbacks, event, tx_hash)
        return tx_hash

    async def _run_callbacks(self, callbacks: List[Callable], *args) -> None:
        for callback in list(callbacks):
            try:
                result = callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Callback error: {e}")
