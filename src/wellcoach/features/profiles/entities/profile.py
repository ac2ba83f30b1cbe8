"""Profile entity."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from ....core.value_objects.identifiers import UserId


class ProfileRole(str, Enum):
    """Role of a platform user."""
    CLIENT = "client"
    COACH = "coach"
    ADMIN = "admin"


@dataclass(frozen=True)
class Profile:
    """Application-side record of a user.
    
    ``id`` is the identity id issued by the identity provider, not an
    independent key.
    """
    
    id: UserId
    email: str
    role: ProfileRole = ProfileRole.CLIENT
    created_at: Optional[datetime] = None
    
    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Profile':
        """Build a profile from a database row."""
        return cls(
            id=UserId(str(record["id"])),
            email=record["email"],
            role=ProfileRole(record["role"]),
            created_at=record.get("created_at"),
        )
