"""Version information for wellcoach-core."""

__version__ = "0.3.0"
