"""Keycloak transport for the identity gateway."""

import logging
from typing import Any, Dict, Optional

from keycloak import KeycloakAdmin, KeycloakOpenID, KeycloakOpenIDConnection
from keycloak.exceptions import (
    KeycloakAuthenticationError,
    KeycloakConnectionError,
    KeycloakError,
)

from ....core.exceptions.auth import (
    IdentityProviderError,
    InvalidCredentialsError,
    PrivilegedKeyExposureError,
    SessionInvalid,
    UserAlreadyExistsError,
)
from ....core.exceptions.base import ConfigurationError
from ..entities.session import TokenSet

logger = logging.getLogger(__name__)


def _normalize_server_url(server_url: str) -> str:
    """Strip the legacy ``/auth`` suffix (Keycloak v18+ serves from the root)."""
    server_url = server_url.rstrip('/')
    if server_url.endswith('/auth'):
        server_url = server_url[:-5]
        logger.info(f"Removed /auth suffix for Keycloak v18+ compatibility: {server_url}")
    return server_url


class KeycloakIdentityProvider:
    """Identity provider transport backed by python-keycloak.
    
    Token operations go through the public OpenID client. Account creation
    and deletion need the admin API, which is only available when the
    provider was built with the privileged service key.
    """
    
    def __init__(
        self,
        server_url: str,
        realm_name: str,
        public_client_id: str,
        *,
        service_client_id: Optional[str] = None,
        service_key: Optional[str] = None,
        verify: bool = True,
    ):
        if not public_client_id:
            raise ConfigurationError("public_client_id is required")
        if service_key is not None and service_key == public_client_id:
            raise ConfigurationError("Privileged key must not be the public client id")
        
        self.server_url = _normalize_server_url(server_url)
        self.realm_name = realm_name
        self.public_client_id = public_client_id
        self.service_client_id = service_client_id
        self._service_key = service_key
        self.verify = verify
        
        self._openid_client: Optional[KeycloakOpenID] = None
        self._admin_client: Optional[KeycloakAdmin] = None
    
    @classmethod
    def from_settings(cls, settings, *, privileged: bool = False) -> 'KeycloakIdentityProvider':
        """Build a provider from settings; only privileged providers see the service key."""
        service_key = None
        if privileged:
            if settings.identity_service_key is None:
                raise ConfigurationError("IDENTITY_SERVICE_KEY is not configured")
            service_key = settings.identity_service_key.get_secret_value()
        
        return cls(
            server_url=settings.identity_provider_url,
            realm_name=settings.identity_realm,
            public_client_id=settings.identity_public_client_id,
            service_client_id=settings.identity_service_client_id if privileged else None,
            service_key=service_key,
            verify=settings.identity_verify_tls,
        )
    
    @property
    def privileged(self) -> bool:
        return self._service_key is not None
    
    def _openid(self) -> KeycloakOpenID:
        if self._openid_client is None:
            self._openid_client = KeycloakOpenID(
                server_url=self.server_url,
                realm_name=self.realm_name,
                client_id=self.public_client_id,
                verify=self.verify,
            )
            logger.info(f"Initialized OpenID client for realm: {self.realm_name}")
        return self._openid_client
    
    def _admin(self) -> KeycloakAdmin:
        if not self.privileged:
            raise PrivilegedKeyExposureError(
                "Admin operations require a privileged server-side client"
            )
        if self._admin_client is None:
            connection = KeycloakOpenIDConnection(
                server_url=self.server_url,
                realm_name=self.realm_name,
                client_id=self.service_client_id,
                client_secret_key=self._service_key,
                verify=self.verify,
            )
            self._admin_client = KeycloakAdmin(connection=connection)
            logger.info(f"Initialized admin client for realm: {self.realm_name}")
        return self._admin_client
    
    async def password_grant(self, email: str, password: str) -> TokenSet:
        try:
            response = await self._openid().a_token(username=email, password=password)
        except KeycloakAuthenticationError as e:
            raise InvalidCredentialsError("Invalid email or password") from e
        except KeycloakConnectionError as e:
            raise IdentityProviderError(f"Identity provider unreachable: {e}") from e
        except KeycloakError as e:
            if e.response_code == 400:
                raise InvalidCredentialsError("Account cannot sign in") from e
            raise IdentityProviderError(f"Token request failed: {e}") from e
        
        return TokenSet.from_keycloak_response(response)
    
    async def refresh(self, refresh_token: str) -> TokenSet:
        try:
            response = await self._openid().a_refresh_token(refresh_token)
        except KeycloakAuthenticationError as e:
            raise SessionInvalid("Refresh token rejected", reason="refresh_rejected") from e
        except KeycloakConnectionError as e:
            raise IdentityProviderError(f"Identity provider unreachable: {e}") from e
        except KeycloakError as e:
            # invalid_grant (expired or revoked refresh token) comes back as 400
            if e.response_code in (400, 401):
                raise SessionInvalid("Refresh token rejected", reason="refresh_rejected") from e
            raise IdentityProviderError(f"Token refresh failed: {e}") from e
        
        return TokenSet.from_keycloak_response(response)
    
    async def userinfo(self, access_token: str) -> Dict[str, Any]:
        try:
            return await self._openid().a_userinfo(access_token)
        except KeycloakAuthenticationError as e:
            raise SessionInvalid("Access token rejected", reason="token_rejected") from e
        except KeycloakConnectionError as e:
            raise IdentityProviderError(f"Identity provider unreachable: {e}") from e
        except KeycloakError as e:
            if e.response_code == 401:
                raise SessionInvalid("Access token rejected", reason="token_rejected") from e
            raise IdentityProviderError(f"Userinfo request failed: {e}") from e
    
    async def revoke(self, refresh_token: str) -> None:
        try:
            await self._openid().a_logout(refresh_token)
        except KeycloakError as e:
            # Token may already be invalid; the cookies get cleared either way
            logger.warning(f"Logout completed with warning: {e}")
    
    async def create_user(self, email: str, password: str) -> str:
        payload = {
            "username": email,
            "email": email,
            "enabled": True,
            "emailVerified": False,
            "credentials": [{"type": "password", "value": password, "temporary": False}],
            "attributes": {"registration_source": "web"},
        }
        
        try:
            user_id = await self._admin().a_create_user(payload, exist_ok=False)
        except KeycloakConnectionError as e:
            raise IdentityProviderError(f"Identity provider unreachable: {e}") from e
        except KeycloakError as e:
            if e.response_code == 409:
                raise UserAlreadyExistsError(f"User with email {email} already exists") from e
            raise IdentityProviderError(f"User creation failed: {e}") from e
        
        logger.info(f"Created identity {user_id}")
        return user_id
    
    async def delete_user(self, user_id: str) -> None:
        try:
            await self._admin().a_delete_user(user_id)
        except KeycloakConnectionError as e:
            raise IdentityProviderError(f"Identity provider unreachable: {e}") from e
        except KeycloakError as e:
            if e.response_code == 404:
                logger.warning(f"Identity {user_id} was already gone")
                return
            raise IdentityProviderError(f"User deletion failed: {e}") from e
        
        logger.info(f"Deleted identity {user_id}")
