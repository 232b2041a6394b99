"""SQLAlchemy implementation of Profile repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import UsernameTakenError
from domain.entities.profile import Profile, ProfileInsertResult
from infrastructure.database.models import ProfileModel

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell a unique-key violation apart from other integrity errors.

    asyncpg exposes the SQLSTATE on the wrapped driver error; SQLite only
    reports it in the message.
    """
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return str(sqlstate) == UNIQUE_VIOLATION
    message = str(orig)
    return "UNIQUE constraint failed" in message or "duplicate key" in message


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by identity ID."""
        stmt = select(ProfileModel).where(ProfileModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_username(self, username: str) -> Profile | None:
        """Get a profile by username."""
        stmt = select(ProfileModel).where(ProfileModel.username == username)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_many(self, ids: list[UUID]) -> dict[UUID, Profile]:
        """Get several profiles in a single query."""
        if not ids:
            return {}
        stmt = select(ProfileModel).where(ProfileModel.id.in_(ids))
        result = await self._session.execute(stmt)
        return {model.id: self._to_entity(model) for model in result.scalars()}

    async def insert(self, profile: Profile) -> ProfileInsertResult:
        """Insert a profile, reporting constraint violations as a tagged result."""
        model = ProfileModel(
            id=profile.id,
            username=profile.username,
            avatar_url=profile.avatar_url,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            if is_unique_violation(exc):
                return ProfileInsertResult.conflict(str(exc.orig))
            return ProfileInsertResult.failed(str(exc.orig))
        except SQLAlchemyError as exc:
            await self._session.rollback()
            return ProfileInsertResult.failed(str(exc))

        await self._session.refresh(model)
        return ProfileInsertResult.created(self._to_entity(model))

    async def update_username(self, id: UUID, username: str) -> Profile | None:
        """Change a profile's username."""
        stmt = select(ProfileModel).where(ProfileModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return None

        model.username = username
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            if is_unique_violation(exc):
                raise UsernameTakenError(username) from exc
            raise

        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: ProfileModel) -> Profile:
        return Profile(
            id=model.id,
            username=model.username,
            avatar_url=model.avatar_url,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
