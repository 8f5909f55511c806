"""Historical and live chain event pipelines."""

from .curve import CurveIndexer, CurveStream, get_curve_event_topics, parse_curve_event
from .dex import DexIndexer, DexStream, PoolDiscovery, parse_swap_event
from .ordering import is_chronological, merge_events, ordering_key, sort_events
from .types import (
    ALL_CURVE_EVENT_TYPES,
    BondingCurveEvent,
    BuyEvent,
    ConnectionState,
    CreateEvent,
    CurveEventType,
    DexEventType,
    IndexerState,
    ListedEvent,
    LockEvent,
    PoolDiscoveryResult,
    PoolMetadata,
    SellEvent,
    StreamState,
    SwapEvent,
    SyncEvent,
)

__all__ = [
    "CurveIndexer",
    "CurveStream",
    "DexIndexer",
    "DexStream",
    "PoolDiscovery",
    "get_curve_event_topics",
    "parse_curve_event",
    "parse_swap_event",
    "is_chronological",
    "merge_events",
    "ordering_key",
    "sort_events",
    "ALL_CURVE_EVENT_TYPES",
    "BondingCurveEvent",
    "BuyEvent",
    "ConnectionState",
    "CreateEvent",
    "CurveEventType",
    "DexEventType",
    "IndexerState",
    "ListedEvent",
    "LockEvent",
    "PoolDiscoveryResult",
    "PoolMetadata",
    "SellEvent",
    "StreamState",
    "SwapEvent",
    "SyncEvent",
]
