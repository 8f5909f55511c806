"""
Shared machinery for historical indexers and live event streams.

Indexers page through a block range in bounded windows against a head
captured once at the start. Streams own one log subscription per watched
address, decode and filter each delivered log, fan events out to listeners,
and reconnect dropped subscriptions with exponential backoff.
"""

import asyncio
import inspect
import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..config import ChainConfig
from ..exceptions import InvalidArgumentError, NetworkError
from ..interfaces import ChainClient, RawLog, Unsubscribe
from ..utils import get_logger
from .ordering import sort_events
from .types import ChainEvent, ConnectionState, IndexerState, StreamState

logger = get_logger(__name__)

EventListener = Callable[[Any], Any]
ErrorListener = Callable[[Exception], Any]


class BaseIndexer:
    """Historical event fetching with head-bounded pagination."""

    def __init__(self, config: ChainConfig, chain: ChainClient):
        self.config = config
        self.chain = chain
        self.state = IndexerState.IDLE
        self.last_completed_block: Optional[int] = None

    async def fetch_events(self, from_block: int, to_block: int, **filters) -> List[ChainEvent]:
        raise NotImplementedError

    async def fetch_all_events(
        self, start_block: int, batch_size: Optional[int] = None, **filters
    ) -> List[ChainEvent]:
        """
        Fetch every event from ``start_block`` to the current head.

        The head is read once; windows are ``[cursor, min(cursor + batch_size - 1, head)]``.
        A failing window aborts the whole call; ``last_completed_block`` then
        holds the last fully processed block so the caller can resume.

        Args:
            start_block: First block to include
            batch_size: Blocks per query (defaults to config.log_batch_size)
            **filters: Passed through to fetch_events

        Returns:
            All matching events in chronological order
        """
        batch_size = self.config.log_batch_size if batch_size is None else batch_size
        if batch_size < 1:
            raise InvalidArgumentError("batch_size must be >= 1", {"batch_size": batch_size})

        self.state = IndexerState.RUNNING
        self.last_completed_block = None
        target_block = await self.chain.get_block_number()
        logger.info(f"📊 Fetching events from block {start_block} to {target_block}")

        all_events: List[ChainEvent] = []
        cursor = start_block
        try:
            while cursor <= target_block:
                to_block = min(cursor + batch_size - 1, target_block)
                logger.debug(f"Processing blocks {cursor} to {to_block}")

                events = await self.fetch_events(cursor, to_block, **filters)
                all_events.extend(events)

                self.last_completed_block = to_block
                cursor = to_block + 1
        except Exception:
            self.state = IndexerState.FAILED
            logger.error(
                f"Indexing failed at block {cursor}; last completed block: "
                f"{self.last_completed_block}"
            )
            raise

        self.state = IndexerState.DONE
        logger.info(f"✅ Fetched {len(all_events)} events")
        return sort_events(all_events)


@dataclass
class Subscription:
    """One live log subscription and its reconnect state."""

    address: str
    unsubscribe: Optional[Unsubscribe] = None
    state: ConnectionState = ConnectionState.DISCONNECTED
    attempts: int = 0
    reconnect_task: Optional[asyncio.Task] = None
    # First block not yet delivered; resubscribes resume here
    next_block: Optional[int] = None

    def release(self) -> None:
        if self.unsubscribe is not None:
            try:
                self.unsubscribe()
            except Exception as e:
                logger.error(f"Error releasing subscription for {self.address}: {e}")
            self.unsubscribe = None

    def status(self, max_attempts: int) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "attempts": self.attempts,
            "max_attempts": max_attempts,
        }


class BaseStream:
    """
    Live stream session: subscriptions, listeners and statistics.

    Subclasses provide the watched addresses, log decoding and the
    client-side filter.
    """

    name = "stream"

    def __init__(self, config: ChainConfig, chain: ChainClient):
        self.config = config
        self.chain = chain
        self.state = StreamState.IDLE

        self._handles = itertools.count(1)
        self._listeners: Dict[int, EventListener] = {}
        self._error_listeners: Dict[int, ErrorListener] = {}
        self._subscriptions: Dict[str, Subscription] = {}

        self.stats = {"events_received": 0, "events_dispatched": 0, "errors": 0}

    # Hooks
    def _watched_addresses(self) -> Iterable[str]:
        raise NotImplementedError

    def _parse(self, log: RawLog, timestamp: Optional[int]) -> Optional[ChainEvent]:
        raise NotImplementedError

    def _accept(self, event: ChainEvent) -> bool:
        return True

    # Listeners
    def _add_listener(self, callback: EventListener) -> Callable[[], None]:
        handle = next(self._handles)
        self._listeners[handle] = callback

        def remove() -> None:
            self._listeners.pop(handle, None)

        return remove

    def on_error(self, callback: ErrorListener) -> Callable[[], None]:
        """Register a callback for subscription errors; returns its remove handle."""
        handle = next(self._handles)
        self._error_listeners[handle] = callback

        def remove() -> None:
            self._error_listeners.pop(handle, None)

        return remove

    def remove_all_listeners(self) -> None:
        self._listeners.clear()

    def listener_count(self) -> int:
        return len(self._listeners)

    def is_streaming(self) -> bool:
        return self.state is StreamState.RUNNING

    # Lifecycle
    async def start(self) -> None:
        if self.state is StreamState.RUNNING:
            logger.info(f"🔄 {self.name} is already running")
            return

        self.state = StreamState.RUNNING
        try:
            head = await self.chain.get_block_number()
        except Exception:
            self.state = StreamState.IDLE
            raise
        for address in self._watched_addresses():
            self._subscribe(address, from_block=head + 1)
        logger.info(f"✅ {self.name} started ({len(self._subscriptions)} subscriptions)")

    def stop(self) -> None:
        """
        Release subscriptions, clear listeners and reset run state.

        Statistics are kept. Listener calls already in flight are not
        interrupted, but nothing new is dispatched once this returns.
        """
        if self.state is not StreamState.RUNNING:
            return

        logger.info(f"🛑 Stopping {self.name}")
        self.state = StreamState.IDLE
        for address in list(self._subscriptions):
            self._unsubscribe(address)
        self.remove_all_listeners()
        self._error_listeners.clear()
        logger.info(f"✅ {self.name} stopped")

    def _subscribe(self, address: str, from_block: Optional[int] = None) -> None:
        key = address.lower()
        if key in self._subscriptions:
            return
        subscription = Subscription(address=address, next_block=from_block)
        self._subscriptions[key] = subscription
        self._connect(subscription)

    def _connect(self, subscription: Subscription) -> None:
        address = subscription.address
        subscription.unsubscribe = self.chain.subscribe_logs(
            address,
            lambda logs: self._handle_logs(subscription, logs),
            lambda error: self._handle_subscription_error(subscription, error),
            from_block=subscription.next_block,
        )
        subscription.state = ConnectionState.CONNECTED
        logger.debug(f"👀 Watching {address}")

    def _unsubscribe(self, address: str) -> None:
        subscription = self._subscriptions.pop(address.lower(), None)
        if subscription is None:
            return
        if subscription.reconnect_task is not None and not subscription.reconnect_task.done():
            subscription.reconnect_task.cancel()
        subscription.release()
        subscription.state = ConnectionState.DISCONNECTED

    # Delivery
    async def _handle_logs(self, subscription: Subscription, logs: List[RawLog]) -> None:
        if subscription.state is ConnectionState.CONNECTED:
            subscription.attempts = 0
        blocks = [int(log["blockNumber"]) for log in logs if log.get("blockNumber") is not None]
        if blocks:
            subscription.next_block = max(subscription.next_block or 0, max(blocks) + 1)

        for log in logs:
            if self.state is not StreamState.RUNNING:
                return
            try:
                block = await self.chain.get_block(log["blockNumber"])
                event = self._parse(log, int(block["timestamp"]))
                if event is None:
                    continue
                self.stats["events_received"] += 1
                if not self._accept(event):
                    continue
                await self._dispatch(event)
            except Exception as e:
                self.stats["errors"] += 1
                logger.error(f"❌ Error processing {self.name} log: {e}")

    async def _dispatch(self, event: ChainEvent) -> None:
        # Snapshot so listeners may add or remove listeners mid-dispatch
        for callback in list(self._listeners.values()):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
                self.stats["events_dispatched"] += 1
            except Exception as e:
                self.stats["errors"] += 1
                logger.error(f"❌ Error in {self.name} listener: {e}")

    # Errors and reconnection
    def _notify_error(self, error: Exception) -> None:
        for callback in list(self._error_listeners.values()):
            try:
                callback(error)
            except Exception as e:
                logger.error(f"❌ Error in {self.name} error listener: {e}")

    def _handle_subscription_error(self, subscription: Subscription, error: Exception) -> None:
        self.stats["errors"] += 1
        logger.warning(f"❌ Subscription error on {subscription.address}: {error}")
        self._notify_error(error)

        if self.state is not StreamState.RUNNING:
            return
        if self._subscriptions.get(subscription.address.lower()) is not subscription:
            return
        if subscription.state is not ConnectionState.CONNECTED:
            return

        subscription.state = ConnectionState.DISCONNECTED
        subscription.reconnect_task = asyncio.get_running_loop().create_task(
            self._reconnect(subscription)
        )

    async def _reconnect(self, subscription: Subscription) -> None:
        """Resubscribe with exponential backoff until connected or out of attempts."""
        policy = self.config.reconnect
        subscription.release()

        while subscription.attempts < policy.max_attempts:
            subscription.attempts += 1
            subscription.state = ConnectionState.RECONNECTING
            delay = policy.delay_for(subscription.attempts)
            logger.info(
                f"🔄 Reconnecting {subscription.address} in {delay:.1f}s "
                f"(attempt {subscription.attempts}/{policy.max_attempts})"
            )
            await asyncio.sleep(delay)

            if self.state is not StreamState.RUNNING:
                return
            try:
                self._connect(subscription)
            except Exception as e:
                logger.warning(f"Reconnect attempt {subscription.attempts} failed: {e}")
                continue

            logger.info(f"✅ Reconnected {subscription.address}")
            return

        subscription.state = ConnectionState.FAILED
        logger.error(
            f"❌ Giving up on {subscription.address} after {policy.max_attempts} attempts"
        )
        self._notify_error(
            NetworkError(
                f"Subscription for {subscription.address} failed after "
                f"{policy.max_attempts} reconnect attempts",
                endpoint=self.config.ws_url or self.config.rpc_url,
                details={"address": subscription.address},
            )
        )

    def get_reconnection_status(self) -> Dict[str, Any]:
        """Aggregate reconnect state plus a per-address breakdown."""
        max_attempts = self.config.reconnect.max_attempts
        subscriptions = {
            sub.address: sub.status(max_attempts) for sub in self._subscriptions.values()
        }

        states = {sub.state for sub in self._subscriptions.values()}
        for state in (
            ConnectionState.FAILED,
            ConnectionState.RECONNECTING,
            ConnectionState.DISCONNECTED,
        ):
            if state in states:
                overall = state
                break
        else:
            overall = (
                ConnectionState.CONNECTED if states else ConnectionState.DISCONNECTED
            )

        return {
            "state": overall.value,
            "attempts": max((sub.attempts for sub in self._subscriptions.values()), default=0),
            "max_attempts": max_attempts,
            "subscriptions": subscriptions,
        }

    def get_stats(self) -> Dict[str, int]:
        return dict(self.stats)
