"""Data sets that refetch on change."""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from ..entities.change_event import ChangeEvent
from .change_feed_subscriber import ChangeFeedSubscriber, ErrorCallback, SubscriptionHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LiveDataset(Generic[T]):
    """A data set kept current by refetching it whenever its table changes.
    
    Any event, whatever the operation, triggers a full refetch. A duplicate
    delivery costs one extra fetch and leaves the same data.
    """
    
    def __init__(self, fetch: Callable[[], Awaitable[Sequence[T]]], name: str = "dataset"):
        self._fetch = fetch
        self.name = name
        self._data: List[T] = []
        self._lock = asyncio.Lock()
        self._handle: Optional[SubscriptionHandle] = None
        self.refetch_count = 0
    
    @property
    def data(self) -> List[T]:
        return list(self._data)
    
    @property
    def handle(self) -> Optional[SubscriptionHandle]:
        return self._handle
    
    async def refresh(self) -> List[T]:
        async with self._lock:
            self._data = list(await self._fetch())
            self.refetch_count += 1
        logger.debug(f"Refetched {self.name}: {len(self._data)} rows")
        return self.data
    
    async def on_change(self, event: ChangeEvent) -> None:
        logger.debug(f"{event.operation.value} on {event.schema}.{event.table}, refetching {self.name}")
        await self.refresh()
    
    async def attach(
        self,
        subscriber: ChangeFeedSubscriber,
        table: str,
        *,
        schema: str = "public",
        on_error: Optional[ErrorCallback] = None,
    ) -> SubscriptionHandle:
        """Load the data once, then follow the table's change feed."""
        await self.refresh()
        self._handle = await subscriber.subscribe(
            table, self.on_change, schema=schema, on_error=on_error
        )
        return self._handle
    
    async def detach(self, subscriber: ChangeFeedSubscriber) -> None:
        if self._handle is not None:
            await subscriber.cancel(self._handle)
            self._handle = None
