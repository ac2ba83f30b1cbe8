"""Value objects shared across wellcoach features."""

from .identifiers import UserId

__all__ = ["UserId"]
