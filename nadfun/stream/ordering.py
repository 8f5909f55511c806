"""
Chronological ordering of chain events.

Both the indexers and the live streams order events by
``(block_number, transaction_index, log_index)``. Anything that merges
historical and live events must re-sort with :func:`merge_events` rather than
assume its inputs are already in order.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from ..interfaces import RawLog
from ..utils import to_checksum, to_hex
from .types import ChainEvent

E = TypeVar("E", bound=ChainEvent)


def ordering_key(event: ChainEvent) -> Tuple[int, int, int]:
    return (event.block_number, event.transaction_index, event.log_index)


def ordering_fields(log: RawLog) -> Optional[Dict[str, Any]]:
    """Common event fields of a raw log, or None when an ordering field is missing."""
    block_number = log.get("blockNumber")
    transaction_index = log.get("transactionIndex")
    log_index = log.get("logIndex")
    if block_number is None or transaction_index is None or log_index is None:
        return None
    return {
        "block_number": int(block_number),
        "transaction_hash": to_hex(log.get("transactionHash")),
        "transaction_index": int(transaction_index),
        "log_index": int(log_index),
        "address": to_checksum(log["address"]),
    }


def sort_events(events: Iterable[E]) -> List[E]:
    """Stable ascending sort into a new list."""
    return sorted(events, key=ordering_key)


def merge_events(*sequences: Iterable[E]) -> List[E]:
    merged: List[E] = []
    for sequence in sequences:
        merged.extend(sequence)
    return sort_events(merged)


def is_chronological(events: Sequence[ChainEvent]) -> bool:
    return all(
        ordering_key(a) <= ordering_key(b) for a, b in zip(events, events[1:])
    )
