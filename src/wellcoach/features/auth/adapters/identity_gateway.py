"""Identity gateway: session and identity operations over one cookie context."""

import logging
from datetime import datetime, timezone
from typing import Optional

import jwt

from ....core.exceptions.auth import IdentityProviderError, SessionInvalid
from ....core.value_objects.identifiers import UserId
from ..entities.cookies import SessionCookiePolicy
from ..entities.identity import Identity
from ..entities.protocols import CookieContextProtocol, IdentityProviderProtocol
from ..entities.session import AuthenticatedUser, Session, TokenSet

logger = logging.getLogger(__name__)


def _token_expiry(access_token: str) -> Optional[datetime]:
    """Read ``exp`` from a JWT without verifying it; the provider verifies."""
    try:
        claims = jwt.decode(access_token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    exp = claims.get("exp")
    if exp is None:
        return None
    try:
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        # Unreadable expiry: let the provider decide on the token
        return None


def _cookie_lifetime(tokens: TokenSet) -> Optional[int]:
    lifetime = tokens.refresh_expires_in or tokens.expires_in
    # 0 means "no expiry" for offline tokens; a 0 max-age would delete the cookie
    return lifetime or None


class IdentityGateway:
    """Contract to the identity provider, bound to a cookie context.
    
    The same class backs the browser, server and middleware clients; only
    the cookie context differs. See ``IdentityClientFactory``.
    """
    
    def __init__(
        self,
        provider: IdentityProviderProtocol,
        cookies: CookieContextProtocol,
        cookie_policy: Optional[SessionCookiePolicy] = None,
        *,
        expiry_leeway_seconds: int = 10,
    ):
        self.provider = provider
        self.cookies = cookies
        self.cookie_policy = cookie_policy or SessionCookiePolicy()
        self.expiry_leeway_seconds = expiry_leeway_seconds
    
    def read_session(self) -> Session:
        """Rebuild the session from the cookie context."""
        access_token = self.cookies.get(self.cookie_policy.access_token_cookie) or None
        refresh_token = self.cookies.get(self.cookie_policy.refresh_token_cookie) or None
        return Session(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=_token_expiry(access_token) if access_token else None,
        )
    
    async def validate_session(self) -> Optional[AuthenticatedUser]:
        """Validate the session in cookies, refreshing tokens when needed.
        
        Renewed tokens are written to the cookie context. A session the
        provider rejects is cleared. An unreachable provider leaves cookies
        untouched. None of these raise; they all mean "no user".
        
        Returns:
            The authenticated user, or None
        """
        try:
            session = self.read_session()
            if session.is_empty:
                return None
            return await self._resolve_user(session)
        except SessionInvalid as e:
            logger.debug(f"Session invalid ({e.reason}), clearing session cookies")
            self.clear_session()
            return None
        except IdentityProviderError as e:
            logger.warning(f"Could not validate session: {e}")
            return None
    
    async def _resolve_user(self, session: Session) -> AuthenticatedUser:
        if session.access_token and not session.is_expired(self.expiry_leeway_seconds):
            try:
                userinfo = await self.provider.userinfo(session.access_token)
                return AuthenticatedUser.from_userinfo(userinfo)
            except SessionInvalid:
                if not session.refresh_token:
                    raise
                logger.debug("Access token rejected, trying refresh")
        
        if not session.refresh_token:
            raise SessionInvalid("Access token expired", reason="expired")
        
        tokens = await self.provider.refresh(session.refresh_token)
        self.store_tokens(tokens)
        logger.debug("Session tokens refreshed")
        
        userinfo = await self.provider.userinfo(tokens.access_token)
        return AuthenticatedUser.from_userinfo(userinfo)
    
    def store_tokens(self, tokens: TokenSet) -> None:
        """Write session cookies for a token set."""
        attributes = self.cookie_policy.attributes(max_age=_cookie_lifetime(tokens))
        self.cookies.set(self.cookie_policy.access_token_cookie, tokens.access_token, **attributes)
        if tokens.refresh_token:
            self.cookies.set(self.cookie_policy.refresh_token_cookie, tokens.refresh_token, **attributes)
    
    def clear_session(self) -> None:
        """Expire both session cookies."""
        attributes = self.cookie_policy.attributes()
        self.cookies.delete(self.cookie_policy.access_token_cookie, **attributes)
        self.cookies.delete(self.cookie_policy.refresh_token_cookie, **attributes)
    
    async def authenticate(self, email: str, password: str) -> AuthenticatedUser:
        """Sign in with credentials and store the new session in cookies.
        
        Raises:
            InvalidCredentialsError: If the provider rejects the credentials
            IdentityProviderError: If the provider is unreachable
        """
        tokens = await self.provider.password_grant(email, password)
        self.store_tokens(tokens)
        userinfo = await self.provider.userinfo(tokens.access_token)
        return AuthenticatedUser.from_userinfo(userinfo)
    
    async def sign_out(self) -> None:
        """Revoke the provider session (best effort) and clear cookies."""
        refresh_token = self.cookies.get(self.cookie_policy.refresh_token_cookie)
        if refresh_token:
            await self.provider.revoke(refresh_token)
        self.clear_session()
    
    async def create_identity(self, email: str, password: str) -> Identity:
        """Create an identity at the provider. Needs a privileged client."""
        user_id = await self.provider.create_user(email, password)
        return Identity(id=UserId(user_id), email=email)
    
    async def delete_identity(self, identity_id: UserId) -> None:
        """Delete an identity at the provider. Needs a privileged client."""
        await self.provider.delete_user(identity_id.value)
