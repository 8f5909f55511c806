"""Unit tests for V3 pool discovery."""

import pytest

from nadfun.exceptions import NetworkError
from nadfun.stream.dex.discovery import PoolDiscovery
from nadfun.utils import ZERO_ADDRESS

from conftest import CONTRACTS, addr

WMON = CONTRACTS["wmon"]
FACTORY = CONTRACTS["v3_factory"]
LOW_TOKEN = addr(0x10)  # sorts before WMON
HIGH_TOKEN = addr(0xFFFF)  # sorts after WMON
POOL = addr(0xF1)


@pytest.fixture
def discovery(chain_config, fake_chain):
    return PoolDiscovery(chain_config, fake_chain)


class TestPoolDiscovery:
    @pytest.mark.asyncio
    async def test_sorted_pair_and_fee_tier(self, discovery, fake_chain):
        fake_chain.set_call(FACTORY, "getPool", POOL)

        await discovery.discover_pools([HIGH_TOKEN])

        assert fake_chain.call_history[0] == (FACTORY, "getPool", [WMON, HIGH_TOKEN, 10000])

    @pytest.mark.asyncio
    async def test_wmon_skipped_and_zero_pools_excluded(self, discovery, fake_chain):
        fake_chain.set_call(
            FACTORY, "getPool", lambda a, b, fee: POOL if LOW_TOKEN in (a, b) else ZERO_ADDRESS
        )

        pools = await discovery.discover_pools([WMON.lower(), LOW_TOKEN, HIGH_TOKEN])

        assert pools == [POOL]
        # WMON never reaches the factory
        assert len(fake_chain.call_history) == 2

    @pytest.mark.asyncio
    async def test_lookup_failure_does_not_stop_others(self, discovery, fake_chain):
        def get_pool(a, b, fee):
            if HIGH_TOKEN in (a, b):
                raise NetworkError("timeout")
            return POOL

        fake_chain.set_call(FACTORY, "getPool", get_pool)

        assert await discovery.discover_pools([HIGH_TOKEN, LOW_TOKEN]) == [POOL]

    @pytest.mark.asyncio
    async def test_discover_pool_token_position(self, discovery, fake_chain):
        fake_chain.set_call(FACTORY, "getPool", POOL)

        low = await discovery.discover_pool(LOW_TOKEN)
        high = await discovery.discover_pool(HIGH_TOKEN)

        assert low.token_position == 0
        assert high.token_position == 1
        assert low.pool.pool_address == POOL
        assert low.pool.fee == 10000

    @pytest.mark.asyncio
    async def test_discover_pool_missing(self, discovery, fake_chain):
        fake_chain.set_call(FACTORY, "getPool", ZERO_ADDRESS)
        assert await discovery.discover_pool(LOW_TOKEN) is None
        assert await discovery.discover_pool(WMON) is None
