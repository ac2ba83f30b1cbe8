"""Authentication and signup exceptions for wellcoach."""

from typing import Optional

from .base import WellcoachError


class AuthenticationError(WellcoachError):
    """Base exception for authentication errors."""
    pass


class SessionInvalid(AuthenticationError):
    """Raised when a session token is expired, absent or unverifiable.
    
    This is the ordinary "logged out" path. The session synchronizer catches it
    and reports an absent user; it never reaches a response handler.
    """
    
    def __init__(self, message: str = "Session is invalid", *, reason: Optional[str] = None):
        super().__init__(message, details={"reason": reason} if reason else None)
        self.reason = reason


class InvalidCredentialsError(AuthenticationError):
    """Raised when authentication credentials are invalid."""
    pass


class UserAlreadyExistsError(AuthenticationError):
    """Raised when an identity with the same email already exists."""
    pass


class IdentityProviderError(AuthenticationError):
    """Raised when the identity provider is unreachable or misbehaves."""
    pass


class PrivilegedKeyExposureError(WellcoachError):
    """Raised when a privileged client is requested outside a server-only context."""
    pass


class SignupError(WellcoachError):
    """Base exception for signup saga failures."""
    pass


class IdentityCreationError(SignupError):
    """The identity provider rejected the sign-up. Nothing was created."""
    pass


class ProfileCreationError(SignupError):
    """The profile write failed and the identity was rolled back."""
    
    def __init__(self, message: str, *, identity_id: str, cause: Optional[BaseException] = None):
        super().__init__(message, details={"identity_id": identity_id})
        self.identity_id = identity_id
        self.cause = cause


class CompensationFailure(SignupError):
    """The profile write failed and deleting the identity failed too.
    
    An orphaned identity now exists without a profile. This is not a
    validation error; it needs operator or reconciliation-job attention.
    """
    
    def __init__(
        self,
        message: str,
        *,
        identity_id: str,
        email: str,
        original_error: BaseException,
        compensation_error: BaseException,
    ):
        super().__init__(
            message,
            details={
                "identity_id": identity_id,
                "original_error": repr(original_error),
                "compensation_error": repr(compensation_error),
            },
        )
        self.identity_id = identity_id
        self.email = email
        self.original_error = original_error
        self.compensation_error = compensation_error
