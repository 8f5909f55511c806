"""
Shared fixtures: an in-memory chain client, a stub signer and raw log builders.

Raw logs are encoded with the real web3 ABI codec so the parsers see exactly
what a node would return.
"""

import inspect
from typing import Any, Callable, Dict, List, Optional

import pytest
from web3 import Web3

from nadfun.abis import (
    CURVE_EVENT_TOPICS,
    CURVE_EVENTS,
    SWAP_EVENT,
    SWAP_EVENT_TOPIC,
    codec,
)
from nadfun.config import ChainConfig, ContractAddresses, ReconnectPolicy
from nadfun.interfaces import DeterministicTimeProvider


def addr(n: int) -> str:
    """Deterministic checksummed test address."""
    return Web3.to_checksum_address(f"0x{n:040x}")


CONTRACTS = {
    "bonding_curve_router": addr(0x1001),
    "dex_router": addr(0x1002),
    "lens": addr(0x1003),
    "curve": addr(0x1004),
    "wmon": addr(0x1005),
    "v3_factory": addr(0x1006),
}

# Hardhat default account #0, never holds real funds
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class FakeChain:
    """
    In-memory ChainClient.

    Contract reads come from a call table keyed by (address, function); logs
    from a list filtered by address and block range. Live subscriptions are
    driven by hand with ``push_logs`` and ``fail_subscription``.
    """

    def __init__(self, signer_address: str = TEST_ADDRESS):
        self.signer_address = signer_address
        self.head = 0
        self.logs: List[Dict[str, Any]] = []
        self.block_timestamps: Dict[int, int] = {}
        self.balances: Dict[str, int] = {}
        self.code: set = set()
        self.gas_price = 50 * 10**9
        self.gas_estimate: Any = 100_000

        self._calls: Dict[tuple, Any] = {}
        self.call_history: List[tuple] = []
        self.get_logs_calls: List[tuple] = []
        self.get_logs_error: Optional[Callable[[int, int], Optional[Exception]]] = None
        self.estimate_calls: List[Dict[str, Any]] = []
        self.sent: List[Dict[str, Any]] = []
        self.waited: List[str] = []
        self.reverts: Dict[str, Exception] = {}
        self.send_error: Optional[Exception] = None

        self.subscriptions: List[Dict[str, Any]] = []
        self.subscribe_error: Optional[Exception] = None

    # Call table
    def set_call(self, address: str, fn_name: str, result: Any) -> None:
        """``result`` may be a value, an exception, or a callable taking the args."""
        self._calls[(address.lower(), fn_name)] = result

    async def call(self, address, abi, fn_name, args):
        self.call_history.append((address, fn_name, list(args)))
        key = (address.lower(), fn_name)
        if key not in self._calls:
            raise AssertionError(f"Unexpected call {fn_name} on {address}")
        result = self._calls[key]
        if isinstance(result, Exception):
            raise result
        if callable(result):
            result = result(*args)
        return result

    async def estimate_gas(self, tx):
        self.estimate_calls.append(dict(tx))
        if isinstance(self.gas_estimate, Exception):
            raise self.gas_estimate
        return self.gas_estimate

    async def send_transaction(self, tx):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(dict(tx))
        return "0x" + f"{len(self.sent):064x}"

    async def wait_for_receipt(self, tx_hash):
        self.waited.append(tx_hash)
        if tx_hash in self.reverts:
            raise self.reverts[tx_hash]
        return {"status": 1, "transactionHash": tx_hash, "blockNumber": self.head}

    # Logs
    def add_logs(self, *logs) -> None:
        self.logs.extend(logs)
        for log in logs:
            self.head = max(self.head, log["blockNumber"])

    async def get_logs(self, address, from_block, to_block, topics=None):
        self.get_logs_calls.append((address, from_block, to_block))
        if self.get_logs_error is not None:
            error = self.get_logs_error(from_block, to_block)
            if error is not None:
                raise error
        addresses = {address.lower()} if isinstance(address, str) else {a.lower() for a in address}
        return [
            log
            for log in self.logs
            if log["address"].lower() in addresses and from_block <= log["blockNumber"] <= to_block
        ]

    def subscribe_logs(self, address, on_logs, on_error, topics=None, from_block=None):
        if self.subscribe_error is not None:
            raise self.subscribe_error
        entry = {
            "address": address,
            "on_logs": on_logs,
            "on_error": on_error,
            "from_block": from_block,
            "active": True,
        }
        self.subscriptions.append(entry)

        def unsubscribe():
            entry["active"] = False

        return unsubscribe

    def active_subscriptions(self, address: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            s
            for s in self.subscriptions
            if s["active"] and (address is None or s["address"].lower() == address.lower())
        ]

    async def push_logs(self, address: str, logs: List[Dict[str, Any]]) -> None:
        """Deliver logs to every live subscription on ``address``."""
        for entry in self.active_subscriptions(address):
            result = entry["on_logs"](logs)
            if inspect.isawaitable(result):
                await result

    def fail_subscription(self, address: str, error: Exception) -> None:
        for entry in self.active_subscriptions(address):
            entry["on_error"](error)

    # Point reads
    async def get_block(self, number):
        return {"number": number, "timestamp": self.block_timestamps.get(number, 1_700_000_000 + number)}

    async def get_block_number(self):
        return self.head

    async def get_balance(self, address):
        return self.balances.get(address.lower(), 0)

    def set_balance(self, address: str, amount: int) -> None:
        self.balances[address.lower()] = amount

    async def get_gas_price(self):
        return self.gas_price

    async def is_contract(self, address):
        return address.lower() in self.code


class FakeSigner:
    """Signer returning a fixed, well-formed signature."""

    def __init__(self, address: str = TEST_ADDRESS, v: int = 27, error: Optional[Exception] = None):
        self._address = address
        self.v = v
        self.error = error
        self.typed_data_requests: List[Dict[str, Any]] = []

    @property
    def address(self) -> str:
        return self._address

    def sign_typed_data(self, domain, types, primary_type, message) -> bytes:
        self.typed_data_requests.append(
            {"domain": domain, "types": types, "primary_type": primary_type, "message": message}
        )
        if self.error is not None:
            raise self.error
        return b"\x11" * 32 + b"\x22" * 32 + bytes([self.v])

    def sign_transaction(self, tx) -> bytes:
        return b"signed"


# Raw log builders
def _encode_log(
    address: str,
    topic0: str,
    definition,
    args: Dict[str, Any],
    block_number: Optional[int],
    transaction_index: Optional[int],
    log_index: Optional[int],
) -> Dict[str, Any]:
    indexed = [a for a in definition if a[2]]
    non_indexed = [a for a in definition if not a[2]]
    topics = [Web3.to_bytes(hexstr=topic0)]
    topics += [codec.encode([t], [args[name]]) for name, t, _ in indexed]
    data = codec.encode([t for _, t, _ in non_indexed], [args[name] for name, _, _ in non_indexed])
    return {
        "address": address,
        "topics": topics,
        "data": data,
        "blockNumber": block_number,
        "transactionHash": bytes.fromhex(f"{block_number or 0:04x}{transaction_index or 0:04x}".ljust(64, "0")),
        "transactionIndex": transaction_index,
        "logIndex": log_index,
    }


def curve_log(
    event_name: str,
    args: Dict[str, Any],
    block_number: Optional[int] = 1,
    transaction_index: Optional[int] = 0,
    log_index: Optional[int] = 0,
    address: str = CONTRACTS["curve"],
) -> Dict[str, Any]:
    return _encode_log(
        address,
        CURVE_EVENT_TOPICS[event_name],
        CURVE_EVENTS[event_name],
        args,
        block_number,
        transaction_index,
        log_index,
    )


def create_log(token: str, block_number: int = 1, transaction_index: int = 0, log_index: int = 0, **overrides):
    args = {
        "creator": addr(0xC0),
        "token": token,
        "pool": addr(0xB0),
        "name": "Test Token",
        "symbol": "TEST",
        "tokenURI": "ipfs://test",
        "virtualMon": 30 * 10**18,
        "virtualToken": 1_073_000_000 * 10**18,
        "targetTokenAmount": 279_900_191 * 10**18,
    }
    args.update(overrides)
    return curve_log("CurveCreate", args, block_number, transaction_index, log_index)


def trade_log(event_name: str, token: str, block_number: int = 1, transaction_index: int = 0, log_index: int = 0, amount_in: int = 10**18, amount_out: int = 10**20):
    args = {"sender": addr(0xAA), "token": token, "amountIn": amount_in, "amountOut": amount_out}
    return curve_log(event_name, args, block_number, transaction_index, log_index)


def swap_log(
    pool: str,
    block_number: Optional[int] = 1,
    transaction_index: Optional[int] = 0,
    log_index: Optional[int] = 0,
    amount0: int = -5 * 10**18,
    amount1: int = 10**18,
    tick: int = -887,
):
    args = {
        "sender": addr(0xD1),
        "recipient": addr(0xD2),
        "amount0": amount0,
        "amount1": amount1,
        "sqrtPriceX96": 79228162514264337593543950336,
        "liquidity": 10**21,
        "tick": tick,
    }
    return _encode_log(pool, SWAP_EVENT_TOPIC, SWAP_EVENT[1], args, block_number, transaction_index, log_index)


# Fixtures
@pytest.fixture
def chain_config() -> ChainConfig:
    return ChainConfig(
        chain_id=10143,
        rpc_url="http://localhost:8545",
        contracts=ContractAddresses(**CONTRACTS),
        poll_interval=0.01,
        reconnect=ReconnectPolicy(max_attempts=3, initial_delay=0.001, max_delay=0.01, multiplier=2.0),
    )


@pytest.fixture
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def time_provider() -> DeterministicTimeProvider:
    return DeterministicTimeProvider()
