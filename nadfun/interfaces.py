"""
Dependency injection interfaces for improved testability and modularity.

Provides lightweight protocols for the chain transport, the signing wallet and
the clock, so trading, streaming and bot components can be exercised against
in-memory fakes.
"""

import time
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
    runtime_checkable,
)

# A raw log as returned by eth_getLogs (web3 AttributeDict or plain dict)
RawLog = Mapping[str, Any]
LogsCallback = Callable[[List[RawLog]], Union[None, Awaitable[None]]]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class ChainClient(Protocol):
    """Asynchronous point APIs of an EVM JSON-RPC endpoint."""

    async def call(
        self, address: str, abi: Sequence[Dict[str, Any]], fn_name: str, args: Sequence[Any]
    ) -> Any:
        """Read-only contract call."""
        ...

    async def estimate_gas(self, tx: Dict[str, Any]) -> int:
        """Gas estimate for an exact transaction."""
        ...

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        """Sign and broadcast a transaction, returning its hash."""
        ...

    async def wait_for_receipt(self, tx_hash: str) -> Mapping[str, Any]:
        """Block until the transaction is mined."""
        ...

    async def get_logs(
        self,
        address: Union[str, Sequence[str]],
        from_block: int,
        to_block: int,
        topics: Optional[Sequence[Any]] = None,
    ) -> List[RawLog]:
        """Logs emitted by ``address`` in an inclusive block range."""
        ...

    def subscribe_logs(
        self,
        address: str,
        on_logs: LogsCallback,
        on_error: ErrorCallback,
        topics: Optional[Sequence[Any]] = None,
        from_block: Optional[int] = None,
    ) -> Unsubscribe:
        """
        Start delivering logs of ``address``; returns the unsubscribe handle.

        Delivery starts at ``from_block`` when given, otherwise after the
        current head. Each call of ``on_logs`` carries whole blocks.
        """
        ...

    async def get_block(self, number: int) -> Mapping[str, Any]:
        """Block header, at least ``timestamp``."""
        ...

    async def get_block_number(self) -> int:
        """Current chain head."""
        ...

    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        ...

    async def get_gas_price(self) -> int:
        """Current gas price in wei."""
        ...

    async def is_contract(self, address: str) -> bool:
        """True when code is deployed at ``address``."""
        ...


@runtime_checkable
class Signer(Protocol):
    """Holds a signing key and an address."""

    @property
    def address(self) -> str:
        ...

    def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: Dict[str, List[Dict[str, str]]],
        primary_type: str,
        message: Dict[str, Any],
    ) -> bytes:
        """EIP-712 signature (65 bytes, r | s | v)."""
        ...

    def sign_transaction(self, tx: Dict[str, Any]) -> bytes:
        """Raw signed transaction bytes."""
        ...


@runtime_checkable
class TimeProvider(Protocol):
    """Protocol for time-related operations."""

    def current_timestamp(self) -> float:
        """Get current Unix timestamp."""
        ...

    def current_time_ms(self) -> int:
        """Get current time in milliseconds."""
        ...


class SystemTimeProvider:
    """Production time provider using system time."""

    def current_timestamp(self) -> float:
        """Get current Unix timestamp."""
        return time.time()

    def current_time_ms(self) -> int:
        """Get current time in milliseconds."""
        return int(time.time() * 1000)


class DeterministicTimeProvider:
    """Deterministic time provider for testing."""

    def __init__(self, start_time: float = 1735689600.0):  # 2025-01-01
        self._current_time = start_time

    def current_timestamp(self) -> float:
        """Get current timestamp."""
        return self._current_time

    def current_time_ms(self) -> int:
        """Get current time in milliseconds."""
        return int(self._current_time * 1000)

    def advance_time(self, seconds: float) -> None:
        """Manually advance time by specified seconds."""
        self._current_time += seconds

    def set_time(self, timestamp: float) -> None:
        """Set current time to specific timestamp."""
        self._current_time = timestamp
