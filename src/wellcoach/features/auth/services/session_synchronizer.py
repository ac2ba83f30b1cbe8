"""Per-request session refresh that defers cookie writes."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ..adapters.client_factory import IdentityClientFactory
from ..entities.cookies import CookieMutation
from ..entities.session import AuthenticatedUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionRefreshResult:
    """What a session refresh produced for one request.
    
    ``mutations`` must be applied to whatever response is finally returned,
    redirects included, or the browser keeps tokens the provider has already
    rotated. ``cookies`` is the cookie view after those mutations, for
    handlers that run later in the same request.
    """
    
    user: Optional[AuthenticatedUser]
    mutations: List[CookieMutation] = field(default_factory=list)
    cookies: Dict[str, str] = field(default_factory=dict, repr=False)
    
    @property
    def authenticated(self) -> bool:
        return self.user is not None


class SessionSynchronizer:
    """Refreshes the caller's session and captures cookie mutations.
    
    Never builds a response and never raises for an expired or invalid
    session; that is the ordinary logged-out path.
    """
    
    def __init__(self, client_factory: IdentityClientFactory):
        self.client_factory = client_factory
    
    async def refresh(self, incoming_cookies: Mapping[str, str]) -> SessionRefreshResult:
        gateway = self.client_factory.create_middleware_client(incoming_cookies)
        user = await gateway.validate_session()
        mutations = gateway.cookies.mutations()
        
        if mutations:
            logger.debug(
                f"Session refresh produced {len(mutations)} cookie mutation(s): "
                f"{[mutation.name for mutation in mutations]}"
            )
        
        return SessionRefreshResult(
            user=user,
            mutations=mutations,
            cookies=gateway.cookies.get_all(),
        )
