"""
Unit tests for the bundler bot.

Tests cover:
- Sequential execution with failures isolated per operation
- Sell auto-approval and sellPermit signing
- Slippage defaults and overrides
- Confirmation waiting and summaries
"""

import pytest
from web3 import Web3

from nadfun.abis import ERC20_ABI, ROUTER_ABI
from nadfun.bots.bundler import (
    BundledOperation,
    BundledOperationResult,
    BundlerBot,
    BundlerConfig,
    BundleSummary,
)

from conftest import CONTRACTS, TEST_ADDRESS, addr

ROUTER = CONTRACTS["bonding_curve_router"]
TOKEN_A = addr(0xA1)
TOKEN_B = addr(0xB2)
TOKEN_C = addr(0xC3)

_router = Web3().eth.contract(abi=ROUTER_ABI)
_erc20 = Web3().eth.contract(abi=ERC20_ABI)


def _decode(tx):
    contract = _erc20 if tx["to"] != ROUTER else _router
    fn, args = contract.decode_function_input(tx["data"])
    params = args.get("params")
    if params is None:
        return fn.fn_name, tuple(args.values())
    values = tuple(params.values()) if isinstance(params, dict) else tuple(params)
    return fn.fn_name, values


@pytest.fixture
def market(fake_chain):
    fake_chain.set_balance(TEST_ADDRESS, 100 * 10**18)
    fake_chain.set_call(
        CONTRACTS["lens"], "getAmountOut", lambda token, amount, is_buy: (ROUTER, amount * 2)
    )
    for token in (TOKEN_A, TOKEN_B, TOKEN_C):
        fake_chain.set_call(token, "balanceOf", 1000)
        fake_chain.set_call(token, "allowance", 0)
        fake_chain.set_call(token, "name", "Bundle Token")
        fake_chain.set_call(token, "nonces", 4)
    return fake_chain


@pytest.fixture
def bundler(chain_config, market, fake_signer, time_provider):
    return BundlerBot(chain_config, market, fake_signer, time_provider=time_provider)


class TestBundlerExecution:
    @pytest.mark.asyncio
    async def test_failure_does_not_abort_bundle(self, bundler, market):
        operations = [
            BundledOperation("buy", TOKEN_A, 10**18),
            BundledOperation("sell", TOKEN_B, 5000),  # more than the balance
            BundledOperation("buy", TOKEN_C, 10**18),
        ]

        results = await bundler.execute(operations)

        assert [r.success for r in results] == [True, False, True]
        assert [r.operation for r in results] == operations
        assert "Insufficient token balance" in results[1].error
        assert results[0].expected_amount == 2 * 10**18
        summary = bundler.summarize(results)
        assert summary == BundleSummary(total=3, successful=2, failed=1)
        assert summary.successful + summary.failed == summary.total

    @pytest.mark.asyncio
    async def test_buy_uses_default_slippage_and_buffer(self, bundler, market, time_provider):
        await bundler.execute([BundledOperation("buy", TOKEN_A, 100)])

        tx = market.sent[0]
        assert tx["value"] == 100
        assert tx["gas"] == 120_000
        # default 5% on an expected 200
        deadline = int(time_provider.current_timestamp()) + 300
        assert _decode(tx) == ("buy", (190, TOKEN_A, TEST_ADDRESS, deadline))

    @pytest.mark.asyncio
    async def test_per_operation_slippage_override(self, bundler, market):
        await bundler.execute([BundledOperation("buy", TOKEN_A, 100, slippage_percent=10.0)])
        assert _decode(market.sent[0])[1][0] == 180

    @pytest.mark.asyncio
    async def test_sell_approves_router_first(self, bundler, market):
        results = await bundler.execute([BundledOperation("sell", TOKEN_A, 500)])

        assert results[0].success
        approve, sell = market.sent
        assert approve["to"] == TOKEN_A
        assert _decode(approve) == ("approve", (ROUTER, 500))
        name, values = _decode(sell)
        assert name == "sell"
        assert values[:4] == (500, 950, TOKEN_A, TEST_ADDRESS)
        assert sell["gas"] == 115_000

    @pytest.mark.asyncio
    async def test_sell_skips_approval_with_allowance(self, bundler, market):
        market.set_call(TOKEN_A, "allowance", 10**30)

        await bundler.execute([BundledOperation("sell", TOKEN_A, 500)])

        assert [_decode(tx)[0] for tx in market.sent] == ["sell"]

    @pytest.mark.asyncio
    async def test_sell_permit(self, bundler, market, fake_signer, time_provider):
        results = await bundler.execute([BundledOperation("sellPermit", TOKEN_A, 500)])

        assert results[0].success
        deadline = int(time_provider.current_timestamp()) + 300
        permit_request = fake_signer.typed_data_requests[0]
        assert permit_request["message"]["spender"] == ROUTER
        assert permit_request["message"]["value"] == 500
        assert permit_request["message"]["deadline"] == deadline
        assert permit_request["message"]["nonce"] == 4

        tx = market.sent[0]
        name, values = _decode(tx)
        assert name == "sellPermit"
        assert values[:7] == (500, 950, 500, TOKEN_A, TEST_ADDRESS, deadline, 27)
        assert tx["gas"] == 125_000

    @pytest.mark.asyncio
    async def test_unknown_operation_type(self, bundler, market):
        results = await bundler.execute([BundledOperation("swap", TOKEN_A, 1)])

        assert results == [
            BundledOperationResult(
                operation=BundledOperation("swap", TOKEN_A, 1),
                success=False,
                error="Unknown operation type: swap",
            )
        ]
        assert market.sent == []

    @pytest.mark.asyncio
    async def test_insufficient_native_balance(self, bundler, market):
        market.set_balance(TEST_ADDRESS, 10)
        results = await bundler.execute([BundledOperation("buy", TOKEN_A, 11)])
        assert not results[0].success
        assert "Insufficient MON balance" in results[0].error

    @pytest.mark.asyncio
    async def test_confirmation_waiting(self, chain_config, market, fake_signer, time_provider):
        waiting = BundlerBot(chain_config, market, fake_signer, time_provider=time_provider)
        await waiting.execute([BundledOperation("buy", TOKEN_A, 1)])
        assert len(market.waited) == 1

        fire_and_forget = BundlerBot(
            chain_config,
            market,
            fake_signer,
            BundlerConfig(wait_for_confirmation=False),
            time_provider=time_provider,
        )
        await fire_and_forget.execute([BundledOperation("buy", TOKEN_A, 1)])
        assert len(market.waited) == 1
        assert len(market.sent) == 2

    def test_get_address(self, bundler):
        assert bundler.get_address() == TEST_ADDRESS
