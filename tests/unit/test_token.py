"""Unit tests for ERC-20 token access."""

import pytest
from web3 import Web3

from nadfun.abis import ERC20_ABI
from nadfun.exceptions import RevertError
from nadfun.token.token import TokenClient, TokenMetadata

from conftest import CONTRACTS, TEST_ADDRESS, addr

TOKEN = addr(0xBEEF)
ROUTER = CONTRACTS["bonding_curve_router"]

_erc20 = Web3().eth.contract(abi=ERC20_ABI)


@pytest.fixture
def client(chain_config, fake_chain, fake_signer):
    return TokenClient(chain_config, fake_chain, fake_signer)


class TestTokenReads:
    @pytest.mark.asyncio
    async def test_balance_defaults_to_signer(self, client, fake_chain):
        fake_chain.set_call(TOKEN, "balanceOf", lambda owner: 10**18 if owner == TEST_ADDRESS else 0)
        assert await client.get_balance(TOKEN) == 10**18
        assert await client.get_balance(TOKEN, addr(0x99)) == 0

    @pytest.mark.asyncio
    async def test_balance_formatted(self, client, fake_chain):
        fake_chain.set_call(TOKEN, "balanceOf", 15 * 10**17)
        fake_chain.set_call(TOKEN, "decimals", 18)
        assert await client.get_balance_formatted(TOKEN) == (15 * 10**17, "1.5")

    @pytest.mark.asyncio
    async def test_name_and_symbol_fallbacks(self, client, fake_chain):
        fake_chain.set_call(TOKEN, "name", RevertError("reverted"))
        fake_chain.set_call(TOKEN, "symbol", RevertError("reverted"))
        assert await client.get_name(TOKEN) == "Unknown"
        assert await client.get_symbol(TOKEN) == "UNKNOWN"

    @pytest.mark.asyncio
    async def test_metadata(self, client, fake_chain):
        fake_chain.set_call(TOKEN, "name", "Test Token")
        fake_chain.set_call(TOKEN, "symbol", "TEST")
        fake_chain.set_call(TOKEN, "decimals", 18)
        fake_chain.set_call(TOKEN, "totalSupply", 10**27)

        assert await client.get_metadata(TOKEN) == TokenMetadata(
            name="Test Token", symbol="TEST", decimals=18, total_supply=10**27, address=TOKEN
        )

    @pytest.mark.asyncio
    async def test_batch_balances(self, client, fake_chain):
        other = addr(0xCAFE)
        fake_chain.set_call(TOKEN, "balanceOf", 1)
        fake_chain.set_call(other, "balanceOf", 2)
        assert await client.batch_get_balances([TOKEN, other]) == {TOKEN: 1, other: 2}


class TestTokenWrites:
    @pytest.mark.asyncio
    async def test_approve_encodes_call(self, client, fake_chain):
        await client.approve(TOKEN, ROUTER, 500)

        tx = fake_chain.sent[0]
        fn, args = _erc20.decode_function_input(tx["data"])
        assert tx["to"] == TOKEN
        assert fn.fn_name == "approve"
        assert list(args.values()) == [ROUTER, 500]
        assert len(fake_chain.waited) == 1

    @pytest.mark.asyncio
    async def test_ensure_allowance_skips_when_sufficient(self, client, fake_chain):
        fake_chain.set_call(TOKEN, "allowance", 1000)
        assert await client.ensure_allowance(TOKEN, ROUTER, 500) is None
        assert fake_chain.sent == []

    @pytest.mark.asyncio
    async def test_ensure_allowance_approves_shortfall(self, client, fake_chain):
        fake_chain.set_call(TOKEN, "allowance", 100)
        tx_hash = await client.ensure_allowance(TOKEN, ROUTER, 500)
        assert tx_hash is not None
        assert len(fake_chain.sent) == 1

    @pytest.mark.asyncio
    async def test_transfer_without_wait(self, client, fake_chain):
        await client.transfer(TOKEN, addr(0x77), 5, wait=False)
        assert fake_chain.waited == []
