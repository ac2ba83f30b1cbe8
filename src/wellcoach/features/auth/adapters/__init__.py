"""Identity provider adapters and cookie contexts."""

from .client_factory import ClientContext, IdentityClientFactory
from .cookie_contexts import (
    BrowserCookieContext,
    MiddlewareCookieContext,
    ServerCookieContext,
    apply_cookie_mutations,
)
from .identity_gateway import IdentityGateway
from .keycloak_provider import KeycloakIdentityProvider

__all__ = [
    "ClientContext",
    "IdentityClientFactory",
    "BrowserCookieContext",
    "MiddlewareCookieContext",
    "ServerCookieContext",
    "apply_cookie_mutations",
    "IdentityGateway",
    "KeycloakIdentityProvider",
]
