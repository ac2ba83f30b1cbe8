"""Cookie mutation entities.

A session refresh may want to renew or clear cookies. Instead of writing to a
response directly, writes are recorded as ``CookieMutation`` values so the
code that produces the final response can apply them, redirects included.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


@dataclass(frozen=True)
class CookieMutation:
    """A single Set-Cookie directive: name, value and attributes."""
    
    name: str
    value: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    
    @property
    def is_deletion(self) -> bool:
        return self.attributes.get("max_age") == 0
    
    def __repr__(self) -> str:
        # Cookie values are session tokens; keep them out of logs
        return f"CookieMutation(name={self.name!r}, deletion={self.is_deletion})"


class CookieMutationLog:
    """Ordered record of cookie mutations produced during one request."""
    
    def __init__(self, mutations: Optional[List[CookieMutation]] = None):
        self._mutations: List[CookieMutation] = list(mutations or [])
    
    def record(self, mutation: CookieMutation) -> None:
        self._mutations.append(mutation)
    
    def collapse(self) -> List[CookieMutation]:
        """Return the last mutation per name, ordered by when it was last written."""
        latest: Dict[str, CookieMutation] = {}
        for mutation in self._mutations:
            latest.pop(mutation.name, None)
            latest[mutation.name] = mutation
        return list(latest.values())
    
    def __iter__(self) -> Iterator[CookieMutation]:
        return iter(list(self._mutations))
    
    def __len__(self) -> int:
        return len(self._mutations)
    
    def __bool__(self) -> bool:
        return bool(self._mutations)


@dataclass(frozen=True)
class SessionCookiePolicy:
    """Names and attributes of the session cookies."""
    
    access_token_cookie: str = "wc-access-token"
    refresh_token_cookie: str = "wc-refresh-token"
    secure: bool = True
    samesite: str = "lax"
    domain: Optional[str] = None
    path: str = "/"
    
    @classmethod
    def from_settings(cls, settings) -> 'SessionCookiePolicy':
        return cls(
            access_token_cookie=settings.access_token_cookie,
            refresh_token_cookie=settings.refresh_token_cookie,
            secure=settings.session_cookie_secure,
            samesite=settings.session_cookie_samesite,
            domain=settings.session_cookie_domain,
        )
    
    def attributes(self, max_age: Optional[int] = None) -> Dict[str, Any]:
        """Attributes for a session cookie write."""
        attributes: Dict[str, Any] = {
            "path": self.path,
            "httponly": True,
            "secure": self.secure,
            "samesite": self.samesite,
        }
        if self.domain:
            attributes["domain"] = self.domain
        if max_age is not None:
            attributes["max_age"] = max_age
        return attributes
    
    def clearing_attributes(self) -> Dict[str, Any]:
        return self.attributes(max_age=0)
