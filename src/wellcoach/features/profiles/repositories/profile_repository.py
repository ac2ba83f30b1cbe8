"""Profile persistence on PostgreSQL."""

import logging
import re
from typing import List, Optional

import asyncpg

from ....core.exceptions.data import DuplicateProfileError, ProfileStoreError
from ....core.value_objects.identifiers import UserId
from ....database.connection import DatabaseManager
from ..entities.profile import Profile, ProfileRole

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


class ProfileRepository:
    """Profile store keyed by identity id.
    
    Row-Level-Security policies and the table itself are owned by the
    database migrations; this class only reads and writes rows.
    """
    
    def __init__(self, database: DatabaseManager, schema: str = "public", table: str = "profiles"):
        if not database:
            raise ValueError("Database manager is required")
        for identifier in (schema, table):
            if not _IDENTIFIER.match(identifier):
                raise ValueError(f"Invalid SQL identifier: {identifier!r}")
        self.database = database
        self.qualified_table = f"{schema}.{table}"
    
    async def create_profile(
        self, profile_id: UserId, email: str, role: ProfileRole = ProfileRole.CLIENT
    ) -> Profile:
        """Create a profile for an existing identity.
        
        Raises:
            DuplicateProfileError: If a profile with this id already exists
            ProfileStoreError: If the write fails for any other reason
        """
        query = f"""
            INSERT INTO {self.qualified_table} (id, email, role)
            VALUES ($1, $2, $3)
            RETURNING id, email, role, created_at
        """
        try:
            async with self.database.acquire() as conn:
                record = await conn.fetchrow(query, profile_id.value, email, role.value)
        except asyncpg.UniqueViolationError as e:
            raise DuplicateProfileError(
                f"Profile {profile_id} already exists", details={"profile_id": profile_id.value}
            ) from e
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to create profile {profile_id}: {e}")
            raise ProfileStoreError(
                "Profile could not be created", details={"profile_id": profile_id.value}
            ) from e
        
        logger.info(f"Created profile {profile_id} with role {role.value}")
        return Profile.from_record(record)
    
    async def get_profile(self, profile_id: UserId) -> Optional[Profile]:
        query = f"SELECT id, email, role, created_at FROM {self.qualified_table} WHERE id = $1"
        try:
            async with self.database.acquire() as conn:
                record = await conn.fetchrow(query, profile_id.value)
        except (asyncpg.PostgresError, OSError) as e:
            raise ProfileStoreError(
                "Profile could not be loaded", details={"profile_id": profile_id.value}
            ) from e
        
        return Profile.from_record(record) if record else None
    
    async def list_profiles(self, role: Optional[ProfileRole] = None) -> List[Profile]:
        """List profiles, optionally by role, newest first."""
        query = f"SELECT id, email, role, created_at FROM {self.qualified_table}"
        args = []
        if role is not None:
            query += " WHERE role = $1"
            args.append(role.value)
        query += " ORDER BY created_at DESC"
        
        try:
            async with self.database.acquire() as conn:
                records = await conn.fetch(query, *args)
        except (asyncpg.PostgresError, OSError) as e:
            raise ProfileStoreError("Profiles could not be listed") from e
        
        return [Profile.from_record(record) for record in records]
