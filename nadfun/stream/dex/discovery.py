"""
Pool discovery for graduated tokens.

Every graduated token trades in one canonical V3 pool against WMON at the
protocol fee tier; the factory's ``getPool`` returns it, or the zero address
when it does not exist.
"""

from typing import Iterable, List, Optional

from ...abis import V3_FACTORY_ABI
from ...config import ChainConfig
from ...interfaces import ChainClient
from ...utils import get_logger, is_zero_address, same_address, sort_token_pair, to_checksum
from ..types import PoolDiscoveryResult, PoolMetadata

logger = get_logger(__name__)


class PoolDiscovery:
    """Resolves token/WMON pools through the V3 factory."""

    def __init__(self, config: ChainConfig, chain: ChainClient):
        self.config = config
        self.chain = chain
        self.wmon = config.contracts.wmon
        self.factory = config.contracts.v3_factory
        self.fee_tier = config.fee_tier

    async def _lookup(self, token: str) -> Optional[PoolMetadata]:
        if same_address(token, self.wmon):
            logger.info(f"⏭️  Skipping WMON token itself: {token}")
            return None

        token0, token1 = sort_token_pair(to_checksum(token), self.wmon)
        logger.debug(f"Looking for pool: {token0} / {token1} (fee: {self.fee_tier})")

        pool = await self.chain.call(
            self.factory, V3_FACTORY_ABI, "getPool", [token0, token1, self.fee_tier]
        )
        if is_zero_address(pool):
            logger.info(f"❌ No pool found for {token}")
            return None

        logger.info(f"✅ Found pool for {token}: {pool}")
        return PoolMetadata(
            pool_address=to_checksum(pool), token0=token0, token1=token1, fee=self.fee_tier
        )

    async def discover_pools(self, tokens: Iterable[str]) -> List[str]:
        """
        Pool addresses for the given tokens.

        Tokens without a pool, WMON itself, and tokens whose lookup fails
        are left out; a failing lookup does not stop the others.
        """
        tokens = list(tokens)
        logger.info(f"🔍 Discovering pools for {len(tokens)} tokens...")

        pools = []
        for token in tokens:
            try:
                metadata = await self._lookup(token)
            except Exception as e:
                logger.error(f"❌ Error finding pool for {token}: {e}")
                continue
            if metadata is not None:
                pools.append(metadata.pool_address)

        logger.info(f"✅ Found {len(pools)} pools")
        return pools

    async def discover_pool(self, token: str) -> Optional[PoolDiscoveryResult]:
        """Pool metadata for one token, with the token's position in the pair."""
        try:
            metadata = await self._lookup(token)
        except Exception as e:
            logger.error(f"❌ Error finding pool for {token}: {e}")
            return None
        if metadata is None:
            return None

        position = 0 if same_address(metadata.token0, token) else 1
        return PoolDiscoveryResult(pool=metadata, token_position=position)
