"""Change feed subscriptions with explicit cancellation."""

import asyncio
import inspect
import logging
from functools import partial
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from ....core.exceptions.data import ChangeFeedDisconnected, MalformedChangeEventError
from ..entities.change_event import ChangeEvent
from ..entities.protocols import ChangeFeedTransportProtocol, FeedChannelProtocol

logger = logging.getLogger(__name__)

EventCallback = Callable[[ChangeEvent], Any]
ErrorCallback = Callable[[ChangeFeedDisconnected], Any]

_DISCONNECTED = object()


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class SubscriptionHandle:
    """Cancellation handle returned by ``ChangeFeedSubscriber.subscribe``.
    
    The owner must pass it to ``ChangeFeedSubscriber.cancel`` when its scope
    ends; nothing is cleaned up automatically.
    """
    
    def __init__(self, subscription_id: str, schema: str, table: str, channel: str):
        self.id = subscription_id
        self.schema = schema
        self.table = table
        self.channel = channel
        self.active = False
        self.error: Optional[ChangeFeedDisconnected] = None
        self._feed_channel: Optional[FeedChannelProtocol] = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
    
    async def wait_idle(self) -> None:
        """Wait until every event received so far has been handled."""
        await self._queue.join()
    
    def __repr__(self) -> str:
        return (
            f"SubscriptionHandle(id={self.id!r}, table={self.schema}.{self.table}, "
            f"active={self.active})"
        )


class ChangeFeedSubscriber:
    """Keeps live subscriptions to table change feeds.
    
    Each subscription has its own channel and its own delivery task, so
    events reach ``on_event`` one at a time in arrival order. There is no
    ordering across subscriptions and no retry after a disconnect; the
    ``ChangeFeedDisconnected`` error goes to ``on_error`` and the owner
    decides whether to subscribe again.
    """
    
    def __init__(self, transport: ChangeFeedTransportProtocol, channel_prefix: str = "realtime"):
        self.transport = transport
        self.channel_prefix = channel_prefix
        self._subscriptions: Dict[str, SubscriptionHandle] = {}
    
    @property
    def subscriptions(self) -> Dict[str, SubscriptionHandle]:
        return dict(self._subscriptions)
    
    def channel_name(self, schema: str, table: str) -> str:
        return f"{self.channel_prefix}:{schema}.{table}"
    
    async def subscribe(
        self,
        table: str,
        on_event: EventCallback,
        *,
        schema: str = "public",
        on_error: Optional[ErrorCallback] = None,
    ) -> SubscriptionHandle:
        """Subscribe to changes on one table.
        
        Args:
            table: Table name
            on_event: Called once per received event; may be a coroutine function
            schema: Schema of the table
            on_error: Called with ``ChangeFeedDisconnected`` if the channel drops
            
        Returns:
            Handle to pass to ``cancel``
            
        Raises:
            ChangeFeedDisconnected: If the channel cannot be opened
        """
        channel = self.channel_name(schema, table)
        handle = SubscriptionHandle(uuid4().hex, schema, table, channel)
        handle.active = True
        handle._worker = asyncio.create_task(self._deliver(handle, on_event, on_error))
        
        try:
            handle._feed_channel = await self.transport.open(
                channel,
                partial(self._receive, handle),
                partial(self._disconnected, handle),
            )
        except Exception as e:
            handle.active = False
            await self._stop_worker(handle)
            logger.error(f"Could not open change feed channel {channel}: {e}")
            raise ChangeFeedDisconnected(f"Could not open change feed: {e}", channel=channel) from e
        
        self._subscriptions[handle.id] = handle
        logger.info(f"Subscribed to {schema}.{table} ({handle.id})")
        return handle
    
    async def cancel(self, handle: SubscriptionHandle) -> None:
        """End a subscription. Safe to call more than once."""
        self._subscriptions.pop(handle.id, None)
        handle.active = False
        
        feed_channel, handle._feed_channel = handle._feed_channel, None
        try:
            if feed_channel is not None:
                await feed_channel.close()
        finally:
            await self._stop_worker(handle)
        
        logger.info(f"Cancelled subscription to {handle.schema}.{handle.table} ({handle.id})")
    
    async def close_all(self) -> None:
        """Cancel every open subscription, for application shutdown."""
        for handle in list(self._subscriptions.values()):
            await self.cancel(handle)
    
    def _receive(self, handle: SubscriptionHandle, message: str) -> None:
        if not handle.active:
            return
        
        try:
            event = ChangeEvent.from_wire(message)
        except MalformedChangeEventError as e:
            logger.warning(f"Dropped malformed change event on {handle.channel}: {e}")
            return
        
        if not event.matches(handle.schema, handle.table):
            return
        handle._queue.put_nowait(event)
    
    def _disconnected(self, handle: SubscriptionHandle, error: Exception) -> None:
        if not isinstance(error, ChangeFeedDisconnected):
            error = ChangeFeedDisconnected(str(error), channel=handle.channel)
        handle.active = False
        handle.error = error
        handle._queue.put_nowait(_DISCONNECTED)
    
    async def _deliver(
        self,
        handle: SubscriptionHandle,
        on_event: EventCallback,
        on_error: Optional[ErrorCallback],
    ) -> None:
        while True:
            item = await handle._queue.get()
            try:
                if item is _DISCONNECTED:
                    if on_error is not None:
                        await _maybe_await(on_error(handle.error))
                    else:
                        logger.error(f"Change feed {handle.channel} disconnected with no error handler")
                    return
                await _maybe_await(on_event(item))
            except Exception as e:
                logger.exception(f"Change handler for {handle.schema}.{handle.table} failed: {e}")
            finally:
                handle._queue.task_done()
    
    async def _stop_worker(self, handle: SubscriptionHandle) -> None:
        worker, handle._worker = handle._worker, None
        if worker is None or worker.done():
            return
        worker.cancel()
        try:
            await worker
        except asyncio.CancelledError:
            pass
