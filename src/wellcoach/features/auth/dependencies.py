"""FastAPI dependencies for the auth feature.

The placeholders raise until the application overrides them; see
``wellcoach.infrastructure.fastapi.factory.create_app``.
"""

import logging
from typing import Mapping, Optional

from fastapi import HTTPException, Request, status

from ...config.settings import WellcoachSettings, get_settings
from .adapters.client_factory import IdentityClientFactory
from .entities.protocols import ProfileStoreProtocol, ReconciliationSinkProtocol
from .entities.session import AuthenticatedUser
from .services.reconciliation import LoggingReconciliationSink

logger = logging.getLogger(__name__)


def get_app_settings() -> WellcoachSettings:
    return get_settings()


def get_client_factory() -> IdentityClientFactory:
    """Get identity client factory - to be overridden by application."""
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Identity client factory not configured"
    )


def get_profile_store() -> ProfileStoreProtocol:
    """Get profile store - to be overridden by application."""
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Profile store not configured"
    )


def get_reconciliation_sink() -> ReconciliationSinkProtocol:
    return LoggingReconciliationSink()


def session_cookies(request: Request) -> Mapping[str, str]:
    """Cookies as left by the session middleware, falling back to the raw request."""
    cookies = getattr(request.state, "session_cookies", None)
    if cookies is None:
        return request.cookies
    return cookies


def get_current_user(request: Request) -> Optional[AuthenticatedUser]:
    """User resolved by ``SessionSyncMiddleware`` for this request."""
    return getattr(request.state, "user", None)
