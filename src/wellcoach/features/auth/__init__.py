"""Auth feature: session synchronization, route guarding and signup."""

from .adapters import IdentityClientFactory, IdentityGateway, KeycloakIdentityProvider
from .entities import (
    Allow,
    AuthenticatedUser,
    Identity,
    RedirectTo,
    SignupRequest,
    SignupResult,
    SignupStatus,
)
from .middleware import SessionSyncMiddleware
from .services import (
    InMemoryReconciliationSink,
    LoggingReconciliationSink,
    RouteGuard,
    SessionSynchronizer,
    SignupSaga,
)

__all__ = [
    "IdentityClientFactory",
    "IdentityGateway",
    "KeycloakIdentityProvider",
    "Allow",
    "AuthenticatedUser",
    "Identity",
    "RedirectTo",
    "SignupRequest",
    "SignupResult",
    "SignupStatus",
    "SessionSyncMiddleware",
    "InMemoryReconciliationSink",
    "LoggingReconciliationSink",
    "RouteGuard",
    "SessionSynchronizer",
    "SignupSaga",
]
