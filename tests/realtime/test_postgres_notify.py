"""Tests for the PostgreSQL LISTEN/NOTIFY transport."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from wellcoach.core.exceptions.data import ChangeFeedDisconnected
from wellcoach.features.realtime.adapters.postgres_notify import (
    PostgresFeedChannel,
    PostgresNotifyTransport,
)


@pytest.fixture
def connection():
    conn = MagicMock()
    conn.add_listener = AsyncMock()
    conn.remove_listener = AsyncMock()
    conn.close = AsyncMock()
    conn.is_closed = MagicMock(return_value=False)
    return conn


@pytest.fixture
def database(connection):
    database = MagicMock()
    database.connect = AsyncMock(return_value=connection)
    return database


class TestPostgresNotifyTransport:
    
    @pytest.mark.asyncio
    async def test_open_listens_on_dedicated_connection(self, database, connection):
        on_message = MagicMock()
        
        channel = await PostgresNotifyTransport(database).open(
            "realtime:public.check_ins", on_message, MagicMock()
        )
        
        database.connect.assert_awaited_once()
        connection.add_listener.assert_awaited_once_with(
            "realtime:public.check_ins", channel._handle_notification
        )
        channel._handle_notification(connection, 42, "realtime:public.check_ins", '{"x": 1}')
        on_message.assert_called_once_with('{"x": 1}')
    
    @pytest.mark.asyncio
    async def test_open_failure_closes_connection(self, database, connection):
        connection.add_listener.side_effect = OSError("listen failed")
        
        with pytest.raises(OSError):
            await PostgresNotifyTransport(database).open("c", MagicMock(), MagicMock())
        
        connection.close.assert_awaited_once()


class TestPostgresFeedChannel:
    
    @pytest.mark.asyncio
    async def test_termination_reported_once(self, connection):
        on_disconnect = MagicMock()
        channel = PostgresFeedChannel(connection, "c", MagicMock(), on_disconnect)
        await channel.start()
        
        channel._handle_termination(connection)
        channel._handle_termination(connection)
        
        on_disconnect.assert_called_once()
        error = on_disconnect.call_args.args[0]
        assert isinstance(error, ChangeFeedDisconnected)
        assert error.channel == "c"
    
    @pytest.mark.asyncio
    async def test_close_unlistens_and_does_not_report_disconnect(self, connection):
        on_disconnect = MagicMock()
        channel = PostgresFeedChannel(connection, "c", MagicMock(), on_disconnect)
        await channel.start()
        
        await channel.close()
        channel._handle_termination(connection)
        
        connection.remove_termination_listener.assert_called_once_with(channel._handle_termination)
        connection.remove_listener.assert_awaited_once_with("c", channel._handle_notification)
        connection.close.assert_awaited_once()
        on_disconnect.assert_not_called()
