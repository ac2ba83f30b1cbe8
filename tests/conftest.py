"""Pytest configuration and fixtures for wellcoach tests."""

import time
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

import jwt
import pytest
from pydantic import SecretStr

from wellcoach.config.settings import WellcoachSettings
from wellcoach.core.exceptions.auth import (
    IdentityProviderError,
    InvalidCredentialsError,
    SessionInvalid,
    UserAlreadyExistsError,
)
from wellcoach.core.exceptions.data import DuplicateProfileError
from wellcoach.core.value_objects.identifiers import UserId
from wellcoach.features.auth.adapters.client_factory import IdentityClientFactory
from wellcoach.features.auth.entities.session import TokenSet
from wellcoach.features.profiles.entities.profile import Profile, ProfileRole

TOKEN_SIGNING_KEY = "wellcoach-test-signing-key-0123456789abcdef"


def make_access_token(sub: str, expires_in: int = 300) -> str:
    """Signed JWT with an ``exp`` claim, unique per call."""
    claims = {"sub": sub, "exp": int(time.time()) + expires_in, "jti": uuid4().hex}
    return jwt.encode(claims, TOKEN_SIGNING_KEY, algorithm="HS256")


class FakeIdentityProvider:
    """In-memory identity provider with token rotation."""
    
    def __init__(self, privileged: bool = False):
        self._privileged = privileged
        self.users: Dict[str, Dict[str, str]] = {}
        self.access_tokens: Dict[str, str] = {}
        self.refresh_tokens: Dict[str, str] = {}
        self.unreachable = False
        self.delete_error: Optional[Exception] = None
        self.calls: List[str] = []
    
    @property
    def privileged(self) -> bool:
        return self._privileged
    
    def _check_reachable(self) -> None:
        if self.unreachable:
            raise IdentityProviderError("Identity provider unreachable")
    
    def issue(self, user_id: str, expires_in: int = 300) -> TokenSet:
        access_token = make_access_token(user_id, expires_in)
        refresh_token = f"refresh-{uuid4().hex}"
        self.access_tokens[access_token] = user_id
        self.refresh_tokens[refresh_token] = user_id
        return TokenSet(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
            refresh_expires_in=1800,
        )
    
    def add_user(self, email: str, password: str = "secret") -> str:
        user_id = uuid4().hex
        self.users[user_id] = {"email": email, "password": password}
        return user_id
    
    async def password_grant(self, email: str, password: str) -> TokenSet:
        self.calls.append("password_grant")
        self._check_reachable()
        for user_id, user in self.users.items():
            if user["email"] == email and user["password"] == password:
                return self.issue(user_id)
        raise InvalidCredentialsError("Invalid email or password")
    
    async def refresh(self, refresh_token: str) -> TokenSet:
        self.calls.append("refresh")
        self._check_reachable()
        user_id = self.refresh_tokens.pop(refresh_token, None)
        if user_id is None:
            raise SessionInvalid("Refresh token rejected", reason="refresh_rejected")
        return self.issue(user_id)
    
    async def userinfo(self, access_token: str) -> Dict[str, Any]:
        self.calls.append("userinfo")
        self._check_reachable()
        user_id = self.access_tokens.get(access_token)
        if user_id is None:
            raise SessionInvalid("Access token rejected", reason="token_rejected")
        email = self.users.get(user_id, {}).get("email")
        return {"sub": user_id, "email": email}
    
    async def revoke(self, refresh_token: str) -> None:
        self.calls.append("revoke")
        self.refresh_tokens.pop(refresh_token, None)
    
    async def create_user(self, email: str, password: str) -> str:
        self.calls.append("create_user")
        self._check_reachable()
        if any(user["email"] == email for user in self.users.values()):
            raise UserAlreadyExistsError(f"User with email {email} already exists")
        return self.add_user(email, password)
    
    async def delete_user(self, user_id: str) -> None:
        self.calls.append("delete_user")
        if self.delete_error is not None:
            raise self.delete_error
        self.users.pop(user_id, None)


class InMemoryProfileStore:
    """Profile store backed by a dict."""
    
    def __init__(self):
        self.profiles: Dict[str, Profile] = {}
        self.create_error: Optional[Exception] = None
    
    async def create_profile(
        self, profile_id: UserId, email: str, role: ProfileRole = ProfileRole.CLIENT
    ) -> Profile:
        if self.create_error is not None:
            raise self.create_error
        if profile_id.value in self.profiles:
            raise DuplicateProfileError(f"Profile {profile_id} already exists")
        profile = Profile(id=profile_id, email=email, role=role)
        self.profiles[profile_id.value] = profile
        return profile
    
    async def get_profile(self, profile_id: UserId) -> Optional[Profile]:
        return self.profiles.get(profile_id.value)


class FakeFeedChannel:
    """Feed channel whose messages and disconnects are driven by the test."""
    
    def __init__(self, channel: str, on_message: Callable, on_disconnect: Callable):
        self.channel = channel
        self.on_message = on_message
        self.on_disconnect = on_disconnect
        self.closed = False
    
    def emit(self, message: Any) -> None:
        self.on_message(message)
    
    def drop(self, error: Exception) -> None:
        self.on_disconnect(error)
    
    async def close(self) -> None:
        self.closed = True


class FakeChangeFeedTransport:
    """Transport recording every channel it opens."""
    
    def __init__(self):
        self.channels: List[FakeFeedChannel] = []
        self.open_error: Optional[Exception] = None
    
    async def open(self, channel: str, on_message: Callable, on_disconnect: Callable) -> FakeFeedChannel:
        if self.open_error is not None:
            raise self.open_error
        feed_channel = FakeFeedChannel(channel, on_message, on_disconnect)
        self.channels.append(feed_channel)
        return feed_channel


@pytest.fixture
def settings():
    """Settings for tests; cookies are not marked secure so TestClient sends them back."""
    return WellcoachSettings(
        _env_file=None,
        identity_service_key=SecretStr("service-secret"),
        session_cookie_secure=False,
        database_url="postgresql://localhost/wellcoach_test",
    )


@pytest.fixture
def fake_provider():
    return FakeIdentityProvider()


@pytest.fixture
def client_factory(settings, fake_provider):
    """Client factory that hands out the fake provider for every context."""
    def build_provider(settings, *, privileged=False):
        fake_provider._privileged = privileged
        return fake_provider
    
    return IdentityClientFactory(settings, provider_builder=build_provider)


@pytest.fixture
def profile_store():
    return InMemoryProfileStore()


@pytest.fixture
def feed_transport():
    return FakeChangeFeedTransport()


@pytest.fixture
def access_cookie(settings):
    return settings.access_token_cookie


@pytest.fixture
def refresh_cookie(settings):
    return settings.refresh_token_cookie


@pytest.fixture
def token_factory():
    """Factory for access tokens: ``token_factory(sub, expires_in=300)``."""
    return make_access_token


@pytest.fixture
def claims_token_factory():
    """Factory for signed tokens carrying arbitrary claims."""
    def build(**claims):
        return jwt.encode(claims, TOKEN_SIGNING_KEY, algorithm="HS256")
    return build
