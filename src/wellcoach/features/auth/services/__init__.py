"""Auth services."""

from .reconciliation import InMemoryReconciliationSink, LoggingReconciliationSink
from .route_guard import RouteGuard
from .session_synchronizer import SessionRefreshResult, SessionSynchronizer
from .signup_saga import SignupSaga

__all__ = [
    "InMemoryReconciliationSink",
    "LoggingReconciliationSink",
    "RouteGuard",
    "SessionRefreshResult",
    "SessionSynchronizer",
    "SignupSaga",
]
