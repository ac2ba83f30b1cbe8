"""Tests for LiveDataset refetch behavior."""

import json
from unittest.mock import AsyncMock

import pytest

from wellcoach.features.realtime.services.change_feed_subscriber import ChangeFeedSubscriber
from wellcoach.features.realtime.services.live_dataset import LiveDataset


@pytest.fixture
def rows():
    return [{"id": 1, "mood": "ok"}]


@pytest.fixture
def fetch(rows):
    return AsyncMock(side_effect=lambda: list(rows))


@pytest.fixture
def subscriber(feed_transport):
    return ChangeFeedSubscriber(feed_transport)


def insert_event(**payload):
    return json.dumps({"operation": "insert", "schema": "public", "table": "check_ins", "payload": payload})


class TestLiveDataset:
    
    @pytest.mark.asyncio
    async def test_attach_loads_then_follows_changes(self, fetch, rows, subscriber, feed_transport):
        dataset = LiveDataset(fetch, name="check-ins")
        
        handle = await dataset.attach(subscriber, "check_ins")
        assert dataset.data == [{"id": 1, "mood": "ok"}]
        
        rows.append({"id": 2, "mood": "great"})
        feed_transport.channels[0].emit(insert_event(id=2))
        await handle.wait_idle()
        
        assert [row["id"] for row in dataset.data] == [1, 2]
        assert dataset.refetch_count == 2
        await dataset.detach(subscriber)
    
    @pytest.mark.asyncio
    async def test_duplicate_delivery_is_harmless(self, fetch, rows, subscriber, feed_transport):
        dataset = LiveDataset(fetch)
        handle = await dataset.attach(subscriber, "check_ins")
        rows.append({"id": 2, "mood": "great"})
        
        feed_transport.channels[0].emit(insert_event(id=2))
        await handle.wait_idle()
        after_first = dataset.data
        feed_transport.channels[0].emit(insert_event(id=2))
        await handle.wait_idle()
        
        assert dataset.data == after_first
        assert dataset.refetch_count == 3
        await dataset.detach(subscriber)
    
    @pytest.mark.asyncio
    async def test_detach_cancels_subscription(self, fetch, subscriber, feed_transport):
        dataset = LiveDataset(fetch)
        await dataset.attach(subscriber, "check_ins")
        
        await dataset.detach(subscriber)
        await dataset.detach(subscriber)
        
        assert dataset.handle is None
        assert feed_transport.channels[0].closed
        assert subscriber.subscriptions == {}
    
    @pytest.mark.asyncio
    async def test_data_is_a_copy(self, fetch):
        dataset = LiveDataset(fetch)
        await dataset.refresh()
        
        dataset.data.append({"id": 99})
        
        assert len(dataset.data) == 1
