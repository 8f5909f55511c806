"""Uniswap V3 Swap log decoding."""

from typing import Optional

from ...abis import SWAP_EVENT, SWAP_EVENT_TOPIC, decode_event_args
from ...interfaces import RawLog
from ...utils import get_logger, to_hex
from ..ordering import ordering_fields
from ..types import SwapEvent

logger = get_logger(__name__)


def parse_swap_event(log: RawLog, timestamp: Optional[int] = None) -> Optional[SwapEvent]:
    """Decode a pool ``Swap`` log; anything else yields None."""
    try:
        topics = log.get("topics") or []
        if not topics or to_hex(topics[0]).lower() != SWAP_EVENT_TOPIC.lower():
            return None

        base = ordering_fields(log)
        if base is None:
            logger.debug("Dropping Swap log without ordering fields")
            return None

        args = decode_event_args(SWAP_EVENT[1], topics, log.get("data"))
        return SwapEvent(
            **base,
            pool=base["address"],
            sender=args["sender"],
            recipient=args["recipient"],
            amount0=args["amount0"],
            amount1=args["amount1"],
            sqrt_price_x96=args["sqrtPriceX96"],
            liquidity=args["liquidity"],
            tick=int(args["tick"]),
            timestamp=timestamp,
        )
    except Exception as e:
        logger.debug(f"Failed to parse swap event: {e}")
        return None
