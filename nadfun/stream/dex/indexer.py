"""Historical swap events for a set of monitored pools."""

from typing import Iterable, List, Optional

from ...config import ChainConfig
from ...interfaces import ChainClient
from ...utils import get_logger, to_checksum
from ..base import BaseIndexer
from ..ordering import sort_events
from ..types import SwapEvent
from .discovery import PoolDiscovery
from .parser import parse_swap_event

logger = get_logger(__name__)


class DexIndexer(BaseIndexer):
    """Fetches ``Swap`` events from the monitored pools in one query per window."""

    def __init__(self, config: ChainConfig, chain: ChainClient, pool_addresses: Iterable[str]):
        super().__init__(config, chain)
        self.pool_addresses: List[str] = [to_checksum(p) for p in pool_addresses]

    @classmethod
    async def discover_pools_for_tokens(
        cls, config: ChainConfig, chain: ChainClient, tokens: Iterable[str]
    ) -> "DexIndexer":
        """Indexer over the token/WMON pools of ``tokens``."""
        pools = await PoolDiscovery(config, chain).discover_pools(tokens)
        return cls(config, chain, pools)

    @classmethod
    async def discover_pool_for_token(
        cls, config: ChainConfig, chain: ChainClient, token: str
    ) -> "DexIndexer":
        return await cls.discover_pools_for_tokens(config, chain, [token])

    async def fetch_events(
        self, from_block: int, to_block: int, pools: Optional[Iterable[str]] = None
    ) -> List[SwapEvent]:
        """Swaps in ``[from_block, to_block]``, chronologically sorted."""
        addresses = [to_checksum(p) for p in pools] if pools is not None else self.pool_addresses
        if not addresses:
            return []

        logs = await self.chain.get_logs(addresses, from_block, to_block)
        events = []
        for log in logs:
            event = parse_swap_event(log)
            if event is not None:
                events.append(event)
        return sort_events(events)

    async def fetch_all_events(
        self, start_block: int, batch_size: Optional[int] = None
    ) -> List[SwapEvent]:
        if not self.pool_addresses:
            logger.info("No pool addresses to index")
            return []
        return await super().fetch_all_events(start_block, batch_size)

    def get_pool_addresses(self) -> List[str]:
        return list(self.pool_addresses)
