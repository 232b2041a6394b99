"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile, ProfileInsertResult


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by identity ID."""
        ...

    async def get_by_username(self, username: str) -> Profile | None:
        """Get a profile by username."""
        ...

    async def get_many(self, ids: list[UUID]) -> dict[UUID, Profile]:
        """Get several profiles keyed by ID (batch fetch)."""
        ...

    async def insert(self, profile: Profile) -> ProfileInsertResult:
        """Insert a new profile.

        Never raises for constraint violations: a unique violation is reported
        as CONFLICT and any other store error as FAILED.
        """
        ...

    async def update_username(self, id: UUID, username: str) -> Profile | None:
        """Change a profile's username. Returns None if the profile is missing."""
        ...
