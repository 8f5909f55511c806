"""
Bonding-curve log decoding.

Decoding only narrows: logs with an unknown topic, malformed data or missing
ordering fields yield None and are dropped by the caller.
"""

from typing import Iterable, List, Optional

from ...abis import CURVE_EVENT_TOPICS, CURVE_EVENTS, decode_event_args
from ...interfaces import RawLog
from ...utils import get_logger, to_hex
from ..ordering import ordering_fields
from ..types import (
    BondingCurveEvent,
    BuyEvent,
    CreateEvent,
    CurveEventType,
    ListedEvent,
    LockEvent,
    SellEvent,
    SyncEvent,
)

logger = get_logger(__name__)

_EVENT_BY_TOPIC = {topic.lower(): name for name, topic in CURVE_EVENT_TOPICS.items()}


def get_curve_event_topics(event_types: Iterable[CurveEventType]) -> List[str]:
    """Topic0 hashes for the given event types."""
    return [CURVE_EVENT_TOPICS[CurveEventType(t).value] for t in event_types]


def parse_curve_event(log: RawLog, timestamp: Optional[int] = None) -> Optional[BondingCurveEvent]:
    """Decode one raw log from the curve contract."""
    try:
        topics = log.get("topics") or []
        if not topics:
            return None
        name = _EVENT_BY_TOPIC.get(to_hex(topics[0]).lower())
        if name is None:
            return None

        base = ordering_fields(log)
        if base is None:
            logger.debug(f"Dropping {name} log without ordering fields")
            return None

        args = decode_event_args(CURVE_EVENTS[name], topics, log.get("data"))
        event_type = CurveEventType(name)
        base["token"] = args["token"]

        if event_type is CurveEventType.CREATE:
            return CreateEvent(
                **base,
                creator=args["creator"],
                pool=args["pool"],
                name=args["name"],
                symbol=args["symbol"],
                token_uri=args["tokenURI"],
                virtual_mon=args["virtualMon"],
                virtual_token=args["virtualToken"],
                target_token_amount=args["targetTokenAmount"],
                timestamp=timestamp,
            )
        if event_type is CurveEventType.BUY:
            return BuyEvent(
                **base,
                sender=args["sender"],
                amount_in=args["amountIn"],
                amount_out=args["amountOut"],
                timestamp=timestamp,
            )
        if event_type is CurveEventType.SELL:
            return SellEvent(
                **base,
                sender=args["sender"],
                amount_in=args["amountIn"],
                amount_out=args["amountOut"],
                timestamp=timestamp,
            )
        if event_type is CurveEventType.SYNC:
            return SyncEvent(
                **base,
                real_mon_reserve=args["realMonReserve"],
                real_token_reserve=args["realTokenReserve"],
                virtual_mon_reserve=args["virtualMonReserve"],
                virtual_token_reserve=args["virtualTokenReserve"],
                timestamp=timestamp,
            )
        if event_type is CurveEventType.LOCK:
            return LockEvent(**base, timestamp=timestamp)
        return ListedEvent(**base, pool=args["pool"], timestamp=timestamp)

    except Exception as e:
        logger.debug(f"Failed to parse bonding curve event: {e}")
        return None
