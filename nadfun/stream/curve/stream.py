"""
Live bonding-curve event stream.

One subscription on the curve contract; event type and token filters are
applied client-side after decoding, so both can change while running.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from ...config import ChainConfig
from ...interfaces import ChainClient, RawLog
from ...utils import address_set, get_logger
from ..base import BaseStream
from ..types import ALL_CURVE_EVENT_TYPES, BondingCurveEvent, CurveEventType
from .parser import parse_curve_event

logger = get_logger(__name__)


class CurveStream(BaseStream):
    """Streams Create / Buy / Sell / Sync / Lock / Listed events."""

    name = "bonding curve stream"

    def __init__(self, config: ChainConfig, chain: ChainClient):
        super().__init__(config, chain)
        self.curve_address = config.contracts.curve
        self.event_types: List[CurveEventType] = []
        self.token_filter: Optional[Set[str]] = None

    def subscribe_events(self, event_types: Iterable[CurveEventType]) -> "CurveStream":
        """Select event types to deliver; an empty selection means all of them."""
        self.event_types = [CurveEventType(t) for t in event_types]
        return self

    def filter_tokens(self, tokens: Iterable[str]) -> "CurveStream":
        """Deliver only events for these tokens (case-insensitive)."""
        self.token_filter = address_set(tokens)
        return self

    def on_event(self, callback: Callable[[BondingCurveEvent], Any]) -> Callable[[], None]:
        """Register a listener (sync or async); returns its remove handle."""
        return self._add_listener(callback)

    async def start(self) -> None:
        if not self.is_streaming():
            if not self.event_types:
                logger.warning(
                    "⚠️ No event types specified, subscribing to all bonding curve events"
                )
                self.event_types = list(ALL_CURVE_EVENT_TYPES)

            logger.info(f"🎯 Starting bonding curve stream on {self.curve_address}")
            logger.info(f"📋 Event types: {', '.join(t.value for t in self.event_types)}")
            if self.token_filter:
                logger.info(f"🔍 Token filter: {len(self.token_filter)} tokens")

        await super().start()

    def _watched_addresses(self) -> Iterable[str]:
        return [self.curve_address]

    def _parse(self, log: RawLog, timestamp: Optional[int]) -> Optional[BondingCurveEvent]:
        return parse_curve_event(log, timestamp)

    def _accept(self, event: BondingCurveEvent) -> bool:
        if event.type not in self.event_types:
            return False
        if self.token_filter and event.token.lower() not in self.token_filter:
            return False
        return True

    def get_configuration(self) -> Dict[str, Any]:
        return {
            "curve_address": self.curve_address,
            "event_types": [t.value for t in self.event_types],
            "token_filter": sorted(self.token_filter) if self.token_filter else None,
            "rpc_url": self.config.rpc_url,
        }
