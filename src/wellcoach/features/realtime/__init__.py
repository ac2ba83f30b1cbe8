"""Realtime feature: table change feeds for long-lived views."""

from .entities import ChangeEvent, ChangeOperation
from .services import ChangeFeedSubscriber, LiveDataset, SubscriptionHandle

__all__ = [
    "ChangeEvent",
    "ChangeOperation",
    "ChangeFeedSubscriber",
    "LiveDataset",
    "SubscriptionHandle",
]
