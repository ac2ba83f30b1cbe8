"""FastAPI application factory.

Wires the session middleware, auth router and change feed lifecycle onto a
FastAPI application.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...__version__ import __version__
from ...config.logging_config import setup_logging
from ...config.settings import WellcoachSettings, get_settings
from ...core.exceptions.base import WellcoachError, create_error_response, get_http_status_code
from ...database.connection import DatabaseManager
from ...features.auth.adapters.client_factory import IdentityClientFactory
from ...features.auth.dependencies import (
    get_app_settings,
    get_client_factory,
    get_profile_store,
    get_reconciliation_sink,
)
from ...features.auth.entities.protocols import ProfileStoreProtocol, ReconciliationSinkProtocol
from ...features.auth.middleware import SessionSyncMiddleware
from ...features.auth.routers.auth_router import router as auth_router
from ...features.auth.services.reconciliation import LoggingReconciliationSink
from ...features.auth.services.route_guard import RouteGuard
from ...features.auth.services.session_synchronizer import SessionSynchronizer
from ...features.profiles.repositories.profile_repository import ProfileRepository
from ...features.realtime.adapters.postgres_notify import PostgresNotifyTransport
from ...features.realtime.services.change_feed_subscriber import ChangeFeedSubscriber

logger = logging.getLogger(__name__)


def _create_lifespan(database: DatabaseManager):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {app.title}")
        try:
            yield
        finally:
            await app.state.change_feed.close_all()
            await database.close_pool()
            logger.info(f"Stopped {app.title}")
    
    return lifespan


def _add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(WellcoachError)
    async def wellcoach_error_handler(request: Request, exc: WellcoachError) -> JSONResponse:
        status_code = get_http_status_code(exc)
        if status_code >= 500:
            logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=status_code, content=create_error_response(exc))


def create_app(
    settings: Optional[WellcoachSettings] = None,
    *,
    client_factory: Optional[IdentityClientFactory] = None,
    profile_store: Optional[ProfileStoreProtocol] = None,
    reconciliation_sink: Optional[ReconciliationSinkProtocol] = None,
    database: Optional[DatabaseManager] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Create the wellcoach application.
    
    Any collaborator left as ``None`` is built from ``settings``. The database
    pool is opened lazily on first use and closed on shutdown.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging()
    
    database = database or DatabaseManager.from_settings(settings)
    client_factory = client_factory or IdentityClientFactory(settings)
    profile_store = profile_store or ProfileRepository(database)
    reconciliation_sink = reconciliation_sink or LoggingReconciliationSink()
    
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_create_lifespan(database),
    )
    
    app.state.settings = settings
    app.state.database = database
    app.state.client_factory = client_factory
    app.state.change_feed = ChangeFeedSubscriber(
        PostgresNotifyTransport(database),
        channel_prefix=settings.change_feed_channel_prefix,
    )
    
    app.dependency_overrides.update({
        get_app_settings: lambda: settings,
        get_client_factory: lambda: client_factory,
        get_profile_store: lambda: profile_store,
        get_reconciliation_sink: lambda: reconciliation_sink,
    })
    
    app.add_middleware(
        SessionSyncMiddleware,
        synchronizer=SessionSynchronizer(client_factory),
        route_guard=RouteGuard.from_settings(settings),
    )
    
    _add_exception_handlers(app)
    app.include_router(auth_router)
    
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": __version__,
            "environment": settings.environment,
        }
    
    logger.info(
        f"Created {settings.app_name} application",
        extra={"environment": settings.environment, "debug": settings.debug}
    )
    return app
