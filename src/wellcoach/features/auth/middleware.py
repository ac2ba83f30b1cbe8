"""Session synchronization middleware for FastAPI/Starlette."""

import logging
from typing import Callable, List, Optional

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .adapters.cookie_contexts import apply_cookie_mutations
from .entities.route_decision import RedirectTo
from .services.route_guard import RouteGuard
from .services.session_synchronizer import SessionSynchronizer

logger = logging.getLogger(__name__)


class SessionSyncMiddleware(BaseHTTPMiddleware):
    """Synchronizes the session, then routes, on every request.
    
    Order per request:
    1. ``SessionSynchronizer.refresh`` with the incoming cookies
    2. ``RouteGuard.decide`` with the refreshed user
    3. either a redirect or the downstream handler builds the response
    4. the refresh's cookie mutations are applied to that response
    
    Handlers can read ``request.state.user`` and ``request.state.session_cookies``.
    """
    
    def __init__(
        self,
        app,
        synchronizer: SessionSynchronizer,
        route_guard: RouteGuard,
        exempt_paths: Optional[List[str]] = None,
        redirect_status_code: int = 307,
    ):
        super().__init__(app)
        self.synchronizer = synchronizer
        self.route_guard = route_guard
        self.exempt_paths = exempt_paths or [
            "/static",
            "/favicon.ico",
            "/health",
        ]
        self.redirect_status_code = redirect_status_code
    
    def _is_exempt(self, path: str) -> bool:
        """Exempt entries match whole path segments: ``/static`` covers
        ``/static/app.css`` but not ``/statistics``."""
        for exempt in self.exempt_paths:
            exempt = exempt.rstrip("/")
            if path == exempt or path.startswith(exempt + "/"):
                return True
        return False
    
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Refresh session, decide route, propagate cookie mutations."""
        if self._is_exempt(request.url.path):
            return await call_next(request)
        
        result = await self.synchronizer.refresh(request.cookies)
        request.state.user = result.user
        request.state.session_cookies = result.cookies
        
        decision = self.route_guard.decide(request.url.path, result.user)
        
        if isinstance(decision, RedirectTo):
            response = RedirectResponse(decision.url, status_code=self.redirect_status_code)
            apply_cookie_mutations(response, result.mutations)
            logger.info(
                f"Redirected unauthenticated request {request.method} {request.url.path} "
                f"to {decision.location}"
            )
            return response
        
        response = await call_next(request)
        # The handler's own cookie writes happened after the refresh and win
        apply_cookie_mutations(response, result.mutations, keep_existing=True)
        return response
