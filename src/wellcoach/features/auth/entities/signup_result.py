"""Tagged result of a signup saga run."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ....core.exceptions.auth import (
    CompensationFailure,
    IdentityCreationError,
    ProfileCreationError,
    SignupError,
)
from .identity import Identity


class SignupStatus(str, Enum):
    """How a signup attempt ended."""
    CREATED = "created"
    IDENTITY_REJECTED = "identity_rejected"
    PROFILE_REJECTED = "profile_rejected"
    COMPENSATION_FAILED = "compensation_failed"


_STATUS_BY_ERROR = (
    (CompensationFailure, SignupStatus.COMPENSATION_FAILED),
    (ProfileCreationError, SignupStatus.PROFILE_REJECTED),
    (IdentityCreationError, SignupStatus.IDENTITY_REJECTED),
)


@dataclass(frozen=True)
class SignupResult:
    """Outcome of ``SignupSaga.signup``.
    
    Exactly one of ``identity`` and ``error`` is set. A compensation failure
    has its own status so callers cannot mistake it for a validation error.
    """
    
    status: SignupStatus
    identity: Optional[Identity] = None
    error: Optional[SignupError] = None
    
    @classmethod
    def created(cls, identity: Identity) -> 'SignupResult':
        return cls(status=SignupStatus.CREATED, identity=identity)
    
    @classmethod
    def failed(cls, error: SignupError) -> 'SignupResult':
        for error_type, status in _STATUS_BY_ERROR:
            if isinstance(error, error_type):
                return cls(status=status, error=error)
        raise TypeError(f"Unsupported signup error: {type(error).__name__}")
    
    @property
    def ok(self) -> bool:
        return self.status is SignupStatus.CREATED
    
    @property
    def requires_reconciliation(self) -> bool:
        return self.status is SignupStatus.COMPENSATION_FAILED
    
    def unwrap(self) -> Identity:
        """Return the identity or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.identity
