"""Value objects for identifiers in wellcoach."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserId:
    """Opaque identity identifier issued by the identity provider.
    
    Profiles reuse the same value as their primary key, so no format is
    imposed beyond being a non-empty string.
    """
    value: str
    
    def __post_init__(self):
        if not isinstance(self.value, str):
            object.__setattr__(self, 'value', str(self.value))
        if not self.value.strip():
            raise ValueError("UserId must not be empty")
    
    def __str__(self) -> str:
        return self.value
    
    def __repr__(self) -> str:
        return f"UserId(value={self.value!r})"
