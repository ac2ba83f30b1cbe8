"""Exception hierarchy for wellcoach."""

from .base import (
    WellcoachError,
    ConfigurationError,
    get_http_status_code,
    create_error_response,
)
from .auth import (
    AuthenticationError,
    SessionInvalid,
    InvalidCredentialsError,
    UserAlreadyExistsError,
    IdentityProviderError,
    PrivilegedKeyExposureError,
    SignupError,
    IdentityCreationError,
    ProfileCreationError,
    CompensationFailure,
)
from .data import (
    ProfileStoreError,
    DuplicateProfileError,
    ChangeFeedError,
    ChangeFeedDisconnected,
    MalformedChangeEventError,
)

__all__ = [
    "WellcoachError",
    "ConfigurationError",
    "get_http_status_code",
    "create_error_response",
    "AuthenticationError",
    "SessionInvalid",
    "InvalidCredentialsError",
    "UserAlreadyExistsError",
    "IdentityProviderError",
    "PrivilegedKeyExposureError",
    "SignupError",
    "IdentityCreationError",
    "ProfileCreationError",
    "CompensationFailure",
    "ProfileStoreError",
    "DuplicateProfileError",
    "ChangeFeedError",
    "ChangeFeedDisconnected",
    "MalformedChangeEventError",
]
