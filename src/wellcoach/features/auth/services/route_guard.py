"""Protected-path route guard."""

import logging
from typing import Optional, Sequence

from ....core.exceptions.base import ConfigurationError
from ..entities.route_decision import Allow, RedirectTo, RouteDecision
from ..entities.session import AuthenticatedUser

logger = logging.getLogger(__name__)


class RouteGuard:
    """Allows a request or redirects it to the login page.
    
    A path is protected when it starts with any prefix in the table, so
    ``/dashboard`` also covers ``/dashboard-admin``.
    
    Must run after the session has been synchronized; the redirect it asks
    for still has to carry that step's cookie mutations.
    """
    
    def __init__(self, protected_paths: Sequence[str], login_path: str = "/login"):
        self.protected_paths = tuple(
            path.rstrip("/") if len(path) > 1 else path for path in protected_paths
        )
        self.login_path = login_path
        
        if self.is_protected(login_path):
            raise ConfigurationError(
                f"Login path {login_path} is itself protected",
                details={"protected_paths": list(self.protected_paths)},
            )
    
    @classmethod
    def from_settings(cls, settings) -> 'RouteGuard':
        return cls(settings.protected_paths, settings.login_path)
    
    def is_protected(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.protected_paths)
    
    def decide(self, path: str, user: Optional[AuthenticatedUser]) -> RouteDecision:
        if user is not None or not self.is_protected(path):
            return Allow()
        
        logger.debug(f"Unauthenticated request to protected path {path}")
        return RedirectTo(location=self.login_path, next_path=path)
