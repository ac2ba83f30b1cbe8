"""Route guard decisions."""

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlencode


@dataclass(frozen=True)
class Allow:
    """Let the request through to its handler."""


@dataclass(frozen=True)
class RedirectTo:
    """Send the caller to ``location`` (the login page)."""
    
    location: str
    next_path: Optional[str] = None
    
    @property
    def url(self) -> str:
        if not self.next_path:
            return self.location
        return f"{self.location}?{urlencode({'next': self.next_path})}"


RouteDecision = Union[Allow, RedirectTo]
