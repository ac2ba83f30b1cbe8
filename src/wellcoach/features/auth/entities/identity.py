"""Identity and signup request entities."""

from dataclasses import dataclass, field

from ....core.value_objects.identifiers import UserId


@dataclass(frozen=True)
class Identity:
    """An account at the identity provider. Created before its profile."""
    
    id: UserId
    email: str


@dataclass(frozen=True)
class SignupRequest:
    """Credentials submitted by the sign-up form. Never retained."""
    
    email: str
    password: str = field(repr=False)
    
    def __post_init__(self):
        email = (self.email or "").strip().lower()
        if not email or "@" not in email:
            raise ValueError("A valid email address is required")
        if not self.password:
            raise ValueError("A password is required")
        object.__setattr__(self, 'email', email)
