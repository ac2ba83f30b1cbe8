"""PostgreSQL LISTEN/NOTIFY transport for change feeds.

Table triggers publish events with ``pg_notify(channel, json)`` where
``channel`` is ``<prefix>:<schema>.<table>``. NOTIFY payloads are capped at
8000 bytes, which is why events carry row payloads rather than whole
result sets and consumers refetch.
"""

import logging
from typing import Callable

from asyncpg import Connection

from ....core.exceptions.data import ChangeFeedDisconnected
from ....database.connection import DatabaseManager

logger = logging.getLogger(__name__)


class PostgresFeedChannel:
    """One LISTEN registration on a dedicated connection."""
    
    def __init__(
        self,
        connection: Connection,
        channel: str,
        on_message: Callable[[str], None],
        on_disconnect: Callable[[Exception], None],
    ):
        self.connection = connection
        self.channel = channel
        self._on_message = on_message
        self._on_disconnect = on_disconnect
        self._closed = False
    
    async def start(self) -> None:
        self.connection.add_termination_listener(self._handle_termination)
        await self.connection.add_listener(self.channel, self._handle_notification)
        logger.debug(f"Listening on channel {self.channel}")
    
    def _handle_notification(self, connection, pid, channel, payload) -> None:
        self._on_message(payload)
    
    def _handle_termination(self, connection) -> None:
        if self._closed:
            return
        self._closed = True
        logger.warning(f"Change feed connection for {self.channel} terminated")
        self._on_disconnect(
            ChangeFeedDisconnected("Change feed connection lost", channel=self.channel)
        )
    
    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.connection.remove_termination_listener(self._handle_termination)
        try:
            if not self.connection.is_closed():
                await self.connection.remove_listener(self.channel, self._handle_notification)
        finally:
            await self.connection.close()
        logger.debug(f"Stopped listening on channel {self.channel}")


class PostgresNotifyTransport:
    """Change feed transport over asyncpg notifications."""
    
    def __init__(self, database: DatabaseManager):
        self.database = database
    
    async def open(
        self,
        channel: str,
        on_message: Callable[[str], None],
        on_disconnect: Callable[[Exception], None],
    ) -> PostgresFeedChannel:
        connection = await self.database.connect()
        feed_channel = PostgresFeedChannel(connection, channel, on_message, on_disconnect)
        try:
            await feed_channel.start()
        except Exception:
            await connection.close()
            raise
        return feed_channel
