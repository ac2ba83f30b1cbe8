"""Protocol interfaces for the auth feature."""

from abc import abstractmethod
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from ....core.exceptions.auth import CompensationFailure
from ....core.value_objects.identifiers import UserId
from ...profiles.entities.profile import Profile, ProfileRole
from .identity import Identity
from .session import AuthenticatedUser, TokenSet


@runtime_checkable
class CookieContextProtocol(Protocol):
    """Where a client reads and writes transport-level cookies.
    
    Browser, server and middleware clients differ only in the cookie context
    they are given.
    """
    
    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Current value of a cookie, reflecting writes made so far."""
        ...
    
    @abstractmethod
    def get_all(self) -> Dict[str, str]:
        """Snapshot of all cookies, reflecting writes made so far."""
        ...
    
    @abstractmethod
    def set(self, name: str, value: str, **attributes: Any) -> None:
        """Write a cookie."""
        ...
    
    @abstractmethod
    def delete(self, name: str, **attributes: Any) -> None:
        """Expire a cookie."""
        ...


@runtime_checkable
class IdentityProviderProtocol(Protocol):
    """Transport to the external identity provider."""
    
    @property
    @abstractmethod
    def privileged(self) -> bool:
        """Whether this transport holds the privileged key."""
        ...
    
    @abstractmethod
    async def password_grant(self, email: str, password: str) -> TokenSet:
        """Exchange credentials for tokens."""
        ...
    
    @abstractmethod
    async def refresh(self, refresh_token: str) -> TokenSet:
        """Exchange a refresh token for new tokens."""
        ...
    
    @abstractmethod
    async def userinfo(self, access_token: str) -> Dict[str, Any]:
        """Resolve the user behind an access token."""
        ...
    
    @abstractmethod
    async def revoke(self, refresh_token: str) -> None:
        """End the provider-side session."""
        ...
    
    @abstractmethod
    async def create_user(self, email: str, password: str) -> str:
        """Create an account and return its id. Privileged."""
        ...
    
    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        """Delete an account. Privileged."""
        ...


@runtime_checkable
class IdentityGatewayProtocol(Protocol):
    """Session and identity operations bound to one cookie context."""
    
    @abstractmethod
    async def validate_session(self) -> Optional[AuthenticatedUser]:
        """Validate, and if needed refresh, the session held in cookies."""
        ...
    
    @abstractmethod
    async def create_identity(self, email: str, password: str) -> Identity:
        """Create an identity."""
        ...
    
    @abstractmethod
    async def delete_identity(self, identity_id: UserId) -> None:
        """Delete an identity."""
        ...
    
    @abstractmethod
    async def authenticate(self, email: str, password: str) -> AuthenticatedUser:
        """Sign in with credentials and store the session in cookies."""
        ...


@runtime_checkable
class ProfileStoreProtocol(Protocol):
    """Record store for profiles, keyed by identity id."""
    
    @abstractmethod
    async def create_profile(
        self, profile_id: UserId, email: str, role: ProfileRole = ProfileRole.CLIENT
    ) -> Profile:
        """Create a profile for an existing identity."""
        ...
    
    @abstractmethod
    async def get_profile(self, profile_id: UserId) -> Optional[Profile]:
        """Get a profile by identity id."""
        ...


@runtime_checkable
class ReconciliationSinkProtocol(Protocol):
    """Receives orphaned identities left behind by a failed compensation."""
    
    @abstractmethod
    async def report(self, failure: CompensationFailure) -> None:
        """Record the orphan for an operator or reconciliation job."""
        ...


__all__ = [
    "CookieContextProtocol",
    "IdentityProviderProtocol",
    "IdentityGatewayProtocol",
    "ProfileStoreProtocol",
    "ReconciliationSinkProtocol",
]
