"""Profiles feature: the application-side record of each identity."""

from .entities import Profile, ProfileRole

__all__ = ["Profile", "ProfileRole"]
