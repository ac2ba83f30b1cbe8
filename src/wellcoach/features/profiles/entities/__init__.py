"""Profile entities."""

from .profile import Profile, ProfileRole

__all__ = ["Profile", "ProfileRole"]
