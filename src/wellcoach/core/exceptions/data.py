"""Profile store and change feed exceptions for wellcoach."""

from typing import Optional

from .base import WellcoachError


class ProfileStoreError(WellcoachError):
    """Raised when a profile record cannot be written or read."""
    pass


class DuplicateProfileError(ProfileStoreError):
    """Raised when a profile with the same id already exists."""
    pass


class ChangeFeedError(WellcoachError):
    """Base exception for change feed errors."""
    pass


class ChangeFeedDisconnected(ChangeFeedError):
    """Raised or delivered when a change feed channel drops.
    
    Subscriptions are not retried; the owner decides what to do.
    """
    
    def __init__(self, message: str, *, channel: Optional[str] = None):
        super().__init__(message, details={"channel": channel} if channel else None)
        self.channel = channel


class MalformedChangeEventError(ChangeFeedError):
    """Raised when a change feed message cannot be decoded."""
    pass
