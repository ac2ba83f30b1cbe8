"""Database access for wellcoach."""

from .connection import DatabaseManager

__all__ = ["DatabaseManager"]
