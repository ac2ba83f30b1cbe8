"""Session and token entities."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ....core.value_objects.identifiers import UserId


@dataclass(frozen=True)
class TokenSet:
    """Access/refresh token pair issued by the identity provider."""
    
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    refresh_expires_in: Optional[int] = None
    token_type: str = "Bearer"
    issued_at: Optional[datetime] = None
    
    def __post_init__(self):
        if not self.access_token:
            raise ValueError("access_token is required")
        if self.issued_at is None:
            object.__setattr__(self, 'issued_at', datetime.now(timezone.utc))
    
    @property
    def expires_at(self) -> Optional[datetime]:
        if self.expires_in is None:
            return None
        return self.issued_at + timedelta(seconds=self.expires_in)
    
    @classmethod
    def from_keycloak_response(cls, response: Dict[str, Any]) -> 'TokenSet':
        """Create TokenSet from a Keycloak token endpoint response."""
        return cls(
            access_token=response['access_token'],
            refresh_token=response.get('refresh_token'),
            expires_in=response.get('expires_in'),
            refresh_expires_in=response.get('refresh_expires_in'),
            token_type=response.get('token_type', 'Bearer'),
        )


@dataclass(frozen=True)
class AuthenticatedUser:
    """The user behind a valid session."""
    
    id: UserId
    email: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict, repr=False)
    
    @classmethod
    def from_userinfo(cls, userinfo: Dict[str, Any]) -> 'AuthenticatedUser':
        """Build a user from an OpenID Connect userinfo payload."""
        return cls(
            id=UserId(userinfo['sub']),
            email=userinfo.get('email'),
            claims=dict(userinfo),
        )
    
    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id.value, "email": self.email}


@dataclass(frozen=True)
class Session:
    """Session reconstructed from transport cookies for a single request.
    
    Never persisted server-side; ``user_id`` is only set once the provider
    has confirmed the access token.
    """
    
    access_token: Optional[str] = field(default=None, repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)
    expires_at: Optional[datetime] = None
    user_id: Optional[UserId] = None
    
    @property
    def is_empty(self) -> bool:
        return not self.access_token and not self.refresh_token
    
    def is_expired(self, leeway_seconds: int = 0) -> bool:
        """Check if the access token is past its expiry (unknown expiry counts as live)."""
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) + timedelta(seconds=leeway_seconds) >= self.expires_at
