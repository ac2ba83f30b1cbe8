"""Realtime services."""

from .change_feed_subscriber import ChangeFeedSubscriber, SubscriptionHandle
from .live_dataset import LiveDataset

__all__ = ["ChangeFeedSubscriber", "SubscriptionHandle", "LiveDataset"]
