"""Auth API models."""

from .responses import SessionResponse, UserResponse

__all__ = ["SessionResponse", "UserResponse"]
