"""wellcoach-core: session sync, signup and change feeds for the coaching app."""

from .__version__ import __version__
from .config import WellcoachSettings, get_settings
from .core.exceptions import WellcoachError
from .infrastructure.fastapi import create_app

__all__ = [
    "__version__",
    "WellcoachSettings",
    "get_settings",
    "WellcoachError",
    "create_app",
]
