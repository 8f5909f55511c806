"""
Live swap stream over graduated token pools.

Each pool gets its own subscription so every swap is attributed to the pool
that emitted it, and pools can be added or removed while running.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional

from ...config import ChainConfig
from ...interfaces import ChainClient, RawLog
from ...utils import get_logger, to_checksum
from ..base import BaseStream
from ..types import SwapEvent
from .discovery import PoolDiscovery
from .parser import parse_swap_event

logger = get_logger(__name__)


class DexStream(BaseStream):
    """Streams Uniswap V3 ``Swap`` events from a set of pools."""

    name = "DEX swap stream"

    def __init__(self, config: ChainConfig, chain: ChainClient, pool_addresses: Iterable[str]):
        super().__init__(config, chain)
        self.pool_addresses: List[str] = []
        self._add_unique(pool_addresses)

    @classmethod
    async def discover_pools_for_tokens(
        cls, config: ChainConfig, chain: ChainClient, tokens: Iterable[str]
    ) -> "DexStream":
        pools = await PoolDiscovery(config, chain).discover_pools(tokens)
        return cls(config, chain, pools)

    def _add_unique(self, addresses: Iterable[str]) -> List[str]:
        known = {p.lower() for p in self.pool_addresses}
        added = []
        for address in addresses:
            address = to_checksum(address)
            if address.lower() in known:
                continue
            known.add(address.lower())
            self.pool_addresses.append(address)
            added.append(address)
        return added

    def on_swap(self, callback: Callable[[SwapEvent], Any]) -> Callable[[], None]:
        """Register a listener (sync or async); returns its remove handle."""
        return self._add_listener(callback)

    async def start(self) -> None:
        if not self.is_streaming():
            if not self.pool_addresses:
                logger.warning("❌ No pool addresses to monitor")
                return
            logger.info(f"🎯 Starting DEX swap stream for {len(self.pool_addresses)} pools")
        await super().start()

    def add_pool_addresses(self, addresses: Iterable[str]) -> List[str]:
        """Monitor more pools; subscribes them immediately when running."""
        added = self._add_unique(addresses)
        if self.is_streaming():
            for address in added:
                self._subscribe(address)
        return added

    def remove_pool_addresses(self, addresses: Iterable[str]) -> None:
        """Stop monitoring pools and release their subscriptions."""
        removed = {a.lower() for a in addresses}
        self.pool_addresses = [p for p in self.pool_addresses if p.lower() not in removed]
        for address in removed:
            self._unsubscribe(address)

    def get_pool_addresses(self) -> List[str]:
        return list(self.pool_addresses)

    def _watched_addresses(self) -> Iterable[str]:
        return list(self.pool_addresses)

    def _parse(self, log: RawLog, timestamp: Optional[int]) -> Optional[SwapEvent]:
        return parse_swap_event(log, timestamp)

    def get_configuration(self) -> Dict[str, Any]:
        return {
            "pool_addresses": list(self.pool_addresses),
            "pool_count": len(self.pool_addresses),
            "rpc_url": self.config.rpc_url,
        }
