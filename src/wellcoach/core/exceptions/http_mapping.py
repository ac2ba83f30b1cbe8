"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

from .auth import (
    AuthenticationError,
    CompensationFailure,
    IdentityCreationError,
    IdentityProviderError,
    InvalidCredentialsError,
    PrivilegedKeyExposureError,
    ProfileCreationError,
    SessionInvalid,
    SignupError,
    UserAlreadyExistsError,
)
from .base import ConfigurationError, WellcoachError
from .data import (
    ChangeFeedDisconnected,
    ChangeFeedError,
    DuplicateProfileError,
    MalformedChangeEventError,
    ProfileStoreError,
)


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    IdentityCreationError: 400,
    MalformedChangeEventError: 400,
    
    # 401 Unauthorized
    AuthenticationError: 401,
    SessionInvalid: 401,
    InvalidCredentialsError: 401,
    
    # 409 Conflict
    UserAlreadyExistsError: 409,
    DuplicateProfileError: 409,
    
    # 500 Internal Server Error
    SignupError: 500,
    ProfileCreationError: 500,
    CompensationFailure: 500,
    ProfileStoreError: 500,
    ChangeFeedError: 500,
    PrivilegedKeyExposureError: 500,
    ConfigurationError: 500,
    
    # 503 Service Unavailable
    IdentityProviderError: 503,
    ChangeFeedDisconnected: 503,
    
    # Default
    WellcoachError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Resolve the status code for an exception by walking its MRO."""
    for exc_type in type(exception).__mro__:
        if exc_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exc_type]
    return 500
