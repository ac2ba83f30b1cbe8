"""Protocol interfaces for the realtime feature."""

from abc import abstractmethod
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class FeedChannelProtocol(Protocol):
    """An open change feed channel."""
    
    @abstractmethod
    async def close(self) -> None:
        """Stop listening and release the underlying connection."""
        ...


@runtime_checkable
class ChangeFeedTransportProtocol(Protocol):
    """Opens long-lived channels that push raw change messages."""
    
    @abstractmethod
    async def open(
        self,
        channel: str,
        on_message: Callable[[str], None],
        on_disconnect: Callable[[Exception], None],
    ) -> FeedChannelProtocol:
        """Start listening on ``channel``.
        
        ``on_message`` receives each raw payload in arrival order.
        ``on_disconnect`` is called at most once if the channel drops without
        being closed.
        """
        ...
