"""Realtime entities and protocols."""

from .change_event import ChangeEvent, ChangeOperation
from .protocols import ChangeFeedTransportProtocol, FeedChannelProtocol

__all__ = [
    "ChangeEvent",
    "ChangeOperation",
    "ChangeFeedTransportProtocol",
    "FeedChannelProtocol",
]
