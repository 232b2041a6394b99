"""Profile domain entity and profile insert outcomes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Optional
from uuid import UUID


@dataclass
class Profile:
    """Domain entity for the application-owned extension of an identity."""

    id: UUID
    username: str
    avatar_url: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


class InsertOutcome(StrEnum):
    """Result tag of a single profile insert attempt."""

    CREATED = "created"
    CONFLICT = "conflict"  # unique violation on id or username
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ProfileInsertResult:
    """Tagged result of ``IProfileRepository.insert``."""

    outcome: InsertOutcome
    profile: Optional[Profile] = None
    error: Optional[str] = None

    @classmethod
    def created(cls, profile: Profile) -> "ProfileInsertResult":
        return cls(InsertOutcome.CREATED, profile=profile)

    @classmethod
    def conflict(cls, error: str) -> "ProfileInsertResult":
        return cls(InsertOutcome.CONFLICT, error=error)

    @classmethod
    def failed(cls, error: str) -> "ProfileInsertResult":
        return cls(InsertOutcome.FAILED, error=error)
