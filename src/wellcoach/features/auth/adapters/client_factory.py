"""Factories for the browser, server and middleware identity clients."""

import logging
from enum import Enum
from typing import Callable, Dict, Mapping, Optional

from starlette.responses import Response

from ....core.exceptions.auth import PrivilegedKeyExposureError
from ..entities.cookies import SessionCookiePolicy
from ..entities.protocols import IdentityProviderProtocol
from .cookie_contexts import (
    BrowserCookieContext,
    MiddlewareCookieContext,
    ServerCookieContext,
)
from .identity_gateway import IdentityGateway
from .keycloak_provider import KeycloakIdentityProvider

logger = logging.getLogger(__name__)


class ClientContext(str, Enum):
    """Where an identity client runs."""
    BROWSER = "browser"
    SERVER = "server"
    MIDDLEWARE = "middleware"


ProviderBuilder = Callable[..., IdentityProviderProtocol]


class IdentityClientFactory:
    """Builds identity gateways for each runtime context.
    
    Providers are created lazily and shared; the privileged provider is only
    ever built for server clients.
    """
    
    def __init__(self, settings, provider_builder: Optional[ProviderBuilder] = None):
        self.settings = settings
        self.cookie_policy = SessionCookiePolicy.from_settings(settings)
        self._provider_builder = provider_builder or KeycloakIdentityProvider.from_settings
        self._providers: Dict[bool, IdentityProviderProtocol] = {}
    
    def provider_for(self, context: ClientContext, *, privileged: bool = False) -> IdentityProviderProtocol:
        """Get the provider for a context, refusing privilege outside servers.
        
        Raises:
            PrivilegedKeyExposureError: If a privileged provider is requested
                for a browser or middleware client
        """
        if privileged and context is not ClientContext.SERVER:
            logger.error(f"Refused privileged identity client for {context.value} context")
            raise PrivilegedKeyExposureError(
                f"The privileged identity key cannot be used from a {context.value} client",
                details={"context": context.value},
            )
        
        if privileged not in self._providers:
            self._providers[privileged] = self._provider_builder(self.settings, privileged=privileged)
        return self._providers[privileged]
    
    def create_browser_client(
        self, cookies: Optional[Mapping[str, str]] = None, *, privileged: bool = False
    ) -> IdentityGateway:
        provider = self.provider_for(ClientContext.BROWSER, privileged=privileged)
        return IdentityGateway(provider, BrowserCookieContext(cookies), self.cookie_policy)
    
    def create_server_client(
        self,
        request_cookies: Mapping[str, str],
        response: Response,
        *,
        privileged: bool = False,
    ) -> IdentityGateway:
        provider = self.provider_for(ClientContext.SERVER, privileged=privileged)
        return IdentityGateway(
            provider, ServerCookieContext(request_cookies, response), self.cookie_policy
        )
    
    def create_middleware_client(
        self, request_cookies: Mapping[str, str], *, privileged: bool = False
    ) -> IdentityGateway:
        provider = self.provider_for(ClientContext.MIDDLEWARE, privileged=privileged)
        return IdentityGateway(
            provider, MiddlewareCookieContext(request_cookies), self.cookie_policy
        )
