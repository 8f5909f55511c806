"""
Typed chain events and stream state enums.

Event type values keep the on-chain event names so they can be matched
against raw logs and user configuration directly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union


class CurveEventType(str, Enum):
    CREATE = "CurveCreate"
    BUY = "CurveBuy"
    SELL = "CurveSell"
    SYNC = "CurveSync"
    LOCK = "CurveTokenLocked"
    LISTED = "CurveTokenListed"


ALL_CURVE_EVENT_TYPES = tuple(CurveEventType)


class DexEventType(str, Enum):
    SWAP = "Swap"


class StreamState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class ConnectionState(str, Enum):
    """Lifecycle of one live log subscription."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


class IndexerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ChainEvent:
    """Fields every decoded log carries; the last three form the ordering key."""

    block_number: int
    transaction_hash: str
    transaction_index: int
    log_index: int
    address: str


@dataclass(frozen=True)
class CurveEvent(ChainEvent):
    token: str


@dataclass(frozen=True)
class CreateEvent(CurveEvent):
    type: ClassVar[CurveEventType] = CurveEventType.CREATE

    creator: str
    pool: str
    name: str
    symbol: str
    token_uri: str
    virtual_mon: int
    virtual_token: int
    target_token_amount: int
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class BuyEvent(CurveEvent):
    """``amount_in`` is MON spent, ``amount_out`` tokens received."""

    type: ClassVar[CurveEventType] = CurveEventType.BUY

    sender: str
    amount_in: int
    amount_out: int
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class SellEvent(CurveEvent):
    """``amount_in`` is tokens sold, ``amount_out`` MON received."""

    type: ClassVar[CurveEventType] = CurveEventType.SELL

    sender: str
    amount_in: int
    amount_out: int
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class SyncEvent(CurveEvent):
    type: ClassVar[CurveEventType] = CurveEventType.SYNC

    real_mon_reserve: int
    real_token_reserve: int
    virtual_mon_reserve: int
    virtual_token_reserve: int
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class LockEvent(CurveEvent):
    """Trading on the curve is locked for the token."""

    type: ClassVar[CurveEventType] = CurveEventType.LOCK

    timestamp: Optional[int] = None


@dataclass(frozen=True)
class ListedEvent(CurveEvent):
    """The token graduated to the DEX ``pool``."""

    type: ClassVar[CurveEventType] = CurveEventType.LISTED

    pool: str
    timestamp: Optional[int] = None


BondingCurveEvent = Union[CreateEvent, BuyEvent, SellEvent, SyncEvent, LockEvent, ListedEvent]


@dataclass(frozen=True)
class SwapEvent(ChainEvent):
    """
    Uniswap V3 swap.

    ``amount0`` / ``amount1`` are signed pool balance deltas: positive flows
    into the pool, negative flows out.
    """

    type: ClassVar[DexEventType] = DexEventType.SWAP

    pool: str
    sender: str
    recipient: str
    amount0: int
    amount1: int
    sqrt_price_x96: int
    liquidity: int
    tick: int
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class PoolMetadata:
    pool_address: str
    token0: str
    token1: str
    fee: int


@dataclass(frozen=True)
class PoolDiscoveryResult:
    pool: PoolMetadata
    # 0 when the looked-up token is token0, else 1
    token_position: int
