"""Change feed transports."""

from .postgres_notify import PostgresFeedChannel, PostgresNotifyTransport

__all__ = ["PostgresFeedChannel", "PostgresNotifyTransport"]
