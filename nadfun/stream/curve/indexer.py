"""Historical bonding-curve events."""

from typing import Iterable, List, Optional

from ...config import ChainConfig
from ...interfaces import ChainClient, RawLog
from ...utils import address_set, get_logger
from ..base import BaseIndexer
from ..ordering import sort_events
from ..types import BondingCurveEvent, CurveEventType
from .parser import parse_curve_event

logger = get_logger(__name__)


class CurveIndexer(BaseIndexer):
    """Fetches and filters events emitted by the bonding curve contract."""

    def __init__(self, config: ChainConfig, chain: ChainClient):
        super().__init__(config, chain)
        self.curve_address = config.contracts.curve

    async def fetch_events(
        self,
        from_block: int,
        to_block: int,
        event_types: Optional[Iterable[CurveEventType]] = None,
        tokens: Optional[Iterable[str]] = None,
    ) -> List[BondingCurveEvent]:
        """
        Events in ``[from_block, to_block]`` from one log query.

        Args:
            from_block: First block (inclusive)
            to_block: Last block (inclusive)
            event_types: Keep only these types (all when None)
            tokens: Keep only events for these tokens (all when None)

        Returns:
            Matching events in chronological order
        """
        logs = await self.chain.get_logs(self.curve_address, from_block, to_block)
        return self._process_logs(logs, event_types, tokens)

    async def fetch_all_events(
        self,
        start_block: int,
        batch_size: Optional[int] = None,
        event_types: Optional[Iterable[CurveEventType]] = None,
        tokens: Optional[Iterable[str]] = None,
    ) -> List[BondingCurveEvent]:
        event_types = list(event_types) if event_types is not None else None
        tokens = list(tokens) if tokens is not None else None
        return await super().fetch_all_events(
            start_block, batch_size, event_types=event_types, tokens=tokens
        )

    def _process_logs(
        self,
        logs: List[RawLog],
        event_types: Optional[Iterable[CurveEventType]],
        tokens: Optional[Iterable[str]],
    ) -> List[BondingCurveEvent]:
        type_set = {CurveEventType(t) for t in event_types} if event_types is not None else None
        token_set = address_set(tokens)

        events = []
        for log in logs:
            event = parse_curve_event(log)
            if event is None:
                continue
            if type_set is not None and event.type not in type_set:
                continue
            if token_set is not None and event.token.lower() not in token_set:
                continue
            events.append(event)

        return sort_events(events)

    def get_curve_address(self) -> str:
        return self.curve_address
