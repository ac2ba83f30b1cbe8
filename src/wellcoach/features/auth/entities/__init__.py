"""Auth entities and protocols."""

from .cookies import CookieMutation, CookieMutationLog, SessionCookiePolicy
from .identity import Identity, SignupRequest
from .route_decision import Allow, RedirectTo, RouteDecision
from .session import AuthenticatedUser, Session, TokenSet
from .signup_result import SignupResult, SignupStatus
from .protocols import (
    CookieContextProtocol,
    IdentityGatewayProtocol,
    IdentityProviderProtocol,
    ProfileStoreProtocol,
    ReconciliationSinkProtocol,
)

__all__ = [
    "CookieMutation",
    "CookieMutationLog",
    "SessionCookiePolicy",
    "Identity",
    "SignupRequest",
    "Allow",
    "RedirectTo",
    "RouteDecision",
    "AuthenticatedUser",
    "Session",
    "TokenSet",
    "SignupResult",
    "SignupStatus",
    "CookieContextProtocol",
    "IdentityGatewayProtocol",
    "IdentityProviderProtocol",
    "ProfileStoreProtocol",
    "ReconciliationSinkProtocol",
]
